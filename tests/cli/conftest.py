import functools

import click.testing
import pytest

from gaas._cogs.structs.credentials import ConnectionInfo
from gaas.cli import main


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def login(mocker):
    info = ConnectionInfo(server='https://localhost:6443', token='tkn')
    return mocker.patch('gaas._core.intents.piggybacking.login', return_value=info)


@pytest.fixture()
def gateway(mocker):
    """ Mock all operations of the gateway, but keep opening & closing it as usual. """
    cls = 'gaas._core.gateways.crds.CRDClient'
    return mocker.Mock(
        list_namespaces=mocker.patch(f'{cls}.list_namespaces', return_value=['default', 'gaffer']),
        get_all_crd=mocker.patch(f'{cls}.get_all_crd', return_value={'items': []}),
        create_crd=mocker.patch(f'{cls}.create_crd', return_value=None),
        delete_crd=mocker.patch(f'{cls}.delete_crd', return_value=None),
    )
