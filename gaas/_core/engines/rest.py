"""
The REST façade of the gateway: graphs in, custom resources out.

The façade accepts the graphs from its users, converts them to the custom
resources, and forwards them to the cluster via :class:`crds.CRDClient`.
The gateway failures are rendered as JSON problems with the API's own
status codes and messages; the transport failures become "502 Bad Gateway".
"""
import asyncio
import json
import logging
import urllib.parse
from collections.abc import Awaitable, Callable

import aiohttp.web

from gaas._cogs.structs import graphs, payloads
from gaas._core.gateways import crds, failures

logger = logging.getLogger(__name__)

LOCALHOST: str = 'localhost'
HTTP_PORT: int = 80

CLIENT_KEY = aiohttp.web.AppKey('client', crds.CRDClient)

_Handler = Callable[[aiohttp.web.Request], Awaitable[aiohttp.web.StreamResponse]]


def problem(title: str, detail: str, *, status: int) -> aiohttp.web.Response:
    return aiohttp.web.json_response({'title': title, 'detail': detail}, status=status)


@aiohttp.web.middleware
async def failures_middleware(
        request: aiohttp.web.Request,
        handler: _Handler,
) -> aiohttp.web.StreamResponse:
    try:
        return await handler(request)
    except failures.GaasRestApiError as e:
        status = (
            e.status_code if e.status_code else
            400 if isinstance(e, failures.InvalidRequest) else
            502
        )
        logger.warning(f"{request.method} {request.path} failed with {status}: {e.message}")
        return problem(e.body or "Gateway failure", e.message, status=status)


async def get_health(request: aiohttp.web.Request) -> aiohttp.web.Response:
    return aiohttp.web.json_response({'status': 'UP'})


async def get_namespaces(request: aiohttp.web.Request) -> aiohttp.web.Response:
    client = request.app[CLIENT_KEY]
    namespaces = await client.list_namespaces()
    return aiohttp.web.json_response(namespaces)


async def get_graphs(request: aiohttp.web.Request) -> aiohttp.web.Response:
    client = request.app[CLIENT_KEY]
    rsp = await client.get_all_crd()
    return aiohttp.web.json_response([info.as_json() for info in graphs.parse_list(rsp)])


async def create_graph(request: aiohttp.web.Request) -> aiohttp.web.Response:
    client = request.app[CLIENT_KEY]
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        return problem("BadRequest", f"The request body is not a valid JSON: {e}", status=400)

    graph_id = data.get('graphId') if isinstance(data, dict) else None
    description = data.get('description') if isinstance(data, dict) else None
    if not isinstance(graph_id, str):
        return problem("BadRequest", "The graphId must be provided as a string.", status=400)
    if description is not None and not isinstance(description, str):
        return problem("BadRequest", "The description must be a string if provided.", status=400)

    graph = graphs.Graph(graph_id=graph_id, description=description)
    body = graphs.build_body(graph, resource=client.resource)
    await client.create_crd(payloads.CreateResourceRequest(body))
    return aiohttp.web.json_response({'graphId': graph_id, 'description': description}, status=201)


async def delete_graph(request: aiohttp.web.Request) -> aiohttp.web.Response:
    client = request.app[CLIENT_KEY]
    await client.delete_crd(request.match_info['graph_id'])
    return aiohttp.web.Response(status=204)


def make_app(client: crds.CRDClient) -> aiohttp.web.Application:
    app = aiohttp.web.Application(middlewares=[failures_middleware])
    app[CLIENT_KEY] = client
    app.add_routes([
        aiohttp.web.get('/health', get_health),
        aiohttp.web.get('/namespaces', get_namespaces),
        aiohttp.web.get('/graphs', get_graphs),
        aiohttp.web.post('/graphs', create_graph),
        aiohttp.web.delete('/graphs/{graph_id}', delete_graph),
    ])
    return app


async def serve(
        endpoint: str,
        *,
        client: crds.CRDClient,
        ready_flag: asyncio.Event | None = None,  # used for testing
) -> None:
    """
    Serve the REST façade until cancelled.
    """
    parts = urllib.parse.urlsplit(endpoint)
    if parts.scheme == 'http':
        host = parts.hostname or LOCALHOST
        port = parts.port or HTTP_PORT
    else:
        raise ValueError(f"Unsupported scheme: {endpoint}")

    app = make_app(client)
    runner = aiohttp.web.AppRunner(app, handle_signals=False, shutdown_timeout=1.0)
    await runner.setup()

    site = aiohttp.web.TCPSite(runner, host, port)
    await site.start()

    # Log with the actual URL: normalised, with hostname/port set.
    url = urllib.parse.urlunsplit([parts.scheme, f'{host}:{port}', '', '', ''])
    logger.info(f"Serving the graphs of {client.resource!r} in {client.namespace!r} at {url}")
    if ready_flag is not None:
        ready_flag.set()

    try:
        # Sleep forever. No activity is needed.
        await asyncio.Event().wait()
    finally:
        # On any reason of exit, stop serving.
        await asyncio.shield(runner.cleanup())
