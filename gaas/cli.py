import asyncio
import functools
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import click

from gaas._cogs.configs import configuration
from gaas._cogs.structs import credentials, definitions, graphs, payloads
from gaas._core.actions import loggers
from gaas._core.engines import rest
from gaas._core.gateways import crds, failures
from gaas._core.intents import piggybacking

_T = TypeVar('_T')


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: bool | None = None,
                log_refkey: str | None = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def gateway_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to build the settings & credentials in all commands the same way."""
    @click.option('-c', '--config', 'config_path', type=click.Path(exists=True, dir_okay=False))
    @click.option('-n', '--namespace', type=str)
    @click.option('--group', type=str)
    @click.option('--version', 'version', type=str)
    @click.option('--plural', type=str)
    @click.option('--request-timeout', type=float)
    @click.option('--connect-timeout', type=float)
    @click.option('--login', 'login_method', type=click.Choice(sorted(piggybacking.LOGIN_METHODS)),
                  default='auto', show_default=True)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(config_path: str | None, login_method: str,
                namespace: str | None, group: str | None, version: str | None, plural: str | None,
                request_timeout: float | None, connect_timeout: float | None,
                *args: Any, **kwargs: Any) -> Any:
        try:
            info = piggybacking.login(login_method)
            settings = configuration.load_settings(
                config_path,
                defaults={'namespace': info.default_namespace},
                namespace=namespace, group=group, version=version, plural=plural,
                request_timeout=request_timeout, connect_timeout=connect_timeout,
            )
        except (configuration.ConfigurationError, credentials.LoginError) as e:
            raise click.UsageError(str(e))
        return fn(*args, settings=settings, info=info, **kwargs)

    return wrapper


def run_client(
        settings: configuration.GatewaySettings,
        info: credentials.ConnectionInfo,
        fn: Callable[[crds.CRDClient], Coroutine[Any, Any, _T]],
) -> _T:
    """ Run one or few operations with a freshly opened client, and report the failures. """
    async def _run() -> _T:
        async with crds.CRDClient(settings=settings, info=info) as client:
            return await fn(client)

    try:
        return asyncio.run(_run())
    except failures.GaasRestApiError as e:
        click.echo(f"Error {e.status_code}: {e.message}", err=True)
        raise SystemExit(1)


@click.version_option(prog_name='gaas')
@click.group(name='gaas', context_settings=dict(
    auto_envvar_prefix='GAAS',
))
def main() -> None:
    pass


@main.command()
@logging_options
@gateway_options
@click.option('-e', '--endpoint', type=str, default='http://0.0.0.0:8080', show_default=True)
def serve(
        settings: configuration.GatewaySettings,
        info: credentials.ConnectionInfo,
        endpoint: str,
) -> None:
    """ Serve the REST façade for the graphs until interrupted. """
    run_client(settings, info, functools.partial(_serve, endpoint=endpoint))


async def _serve(client: crds.CRDClient, *, endpoint: str) -> None:
    await rest.serve(endpoint, client=client)


@main.command()
@logging_options
@gateway_options
def namespaces(
        settings: configuration.GatewaySettings,
        info: credentials.ConnectionInfo,
) -> None:
    """ List the active namespaces of the cluster. """
    names = run_client(settings, info, lambda client: client.list_namespaces())
    for name in names:
        click.echo(name)


@main.group(name='graphs')
def graphs_group() -> None:
    """ Manage the graphs in the namespace. """


@graphs_group.command(name='list')
@logging_options
@gateway_options
def list_graphs(
        settings: configuration.GatewaySettings,
        info: credentials.ConnectionInfo,
) -> None:
    """ List the graphs with their statuses. """
    rsp = run_client(settings, info, lambda client: client.get_all_crd())
    for graph in graphs.parse_list(rsp):
        click.echo(f"{graph.graph_id}\t{graph.status or '-'}\t{graph.description or ''}")


@graphs_group.command(name='create')
@logging_options
@gateway_options
@click.argument('graph_id')
@click.option('--description', type=str)
@click.option('--dry-run', is_flag=True)
def create_graph(
        settings: configuration.GatewaySettings,
        info: credentials.ConnectionInfo,
        graph_id: str,
        description: str | None,
        dry_run: bool,
) -> None:
    """ Create a graph. """
    graph = graphs.Graph(graph_id=graph_id, description=description)
    body = graphs.build_body(graph, resource=settings.resource)
    request = payloads.CreateResourceRequest(body, dry_run='All' if dry_run else None)
    run_client(settings, info, lambda client: client.create_crd(request))
    click.echo(f"Graph {graph_id} is created{' (dry run)' if dry_run else ''}.")


@graphs_group.command(name='delete')
@logging_options
@gateway_options
@click.argument('graph_id')
def delete_graph(
        settings: configuration.GatewaySettings,
        info: credentials.ConnectionInfo,
        graph_id: str,
) -> None:
    """ Delete a graph. """
    run_client(settings, info, lambda client: client.delete_crd(graph_id))
    click.echo(f"Graph {graph_id} is deleted.")


@main.command()
@click.option('-c', '--config', 'config_path', type=click.Path(exists=True, dir_okay=False))
@click.option('-n', '--namespace', type=str)
@click.option('--group', type=str)
@click.option('--version', 'version', type=str)
@click.option('--plural', type=str)
@click.option('--name', type=str, default='gaffer-controller', show_default=True)
@click.option('--service-account', type=str, default='gaffer-controller', show_default=True)
@click.option('--clusterwide', is_flag=True)
def manifests(
        config_path: str | None,
        namespace: str | None,
        group: str | None,
        version: str | None,
        plural: str | None,
        name: str,
        service_account: str,
        clusterwide: bool,
) -> None:
    """ Print the CRD & RBAC manifests for ``kubectl apply -f -``. """
    try:
        settings = configuration.load_settings(config_path, namespace=namespace,
                                               group=group, version=version, plural=plural)
    except configuration.ConfigurationError as e:
        raise click.UsageError(str(e))
    documents = [definitions.build_crd(settings.resource)]
    documents.extend(definitions.build_status_role(
        settings.resource,
        name=name,
        namespace=settings.namespace,
        service_account=service_account,
        clusterwide=clusterwide,
    ))
    click.echo(definitions.dump_manifests(documents), nl=False)
