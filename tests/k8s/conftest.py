import logging

import pytest

from gaas._cogs.clients.auth import APIContext


@pytest.fixture()
def logger():
    return logging.getLogger('gaas.tests')


@pytest.fixture()
async def context(info):
    context = APIContext(info)
    try:
        yield context
    finally:
        await context.close()
