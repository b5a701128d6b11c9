import contextlib
import dataclasses
import logging
import re
from typing import Any

import aiohttp.test_utils
import aiohttp.web
import pytest

from gaas._cogs.configs.configuration import GatewaySettings, make_settings
from gaas._cogs.structs.credentials import ConnectionInfo
from gaas._core.gateways.crds import CRDClient

# The exact validation as done by the API server for the object names.
DNS1123_SUBDOMAIN = re.compile(r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$')
DNS1123_MESSAGE = (
    "a DNS-1123 subdomain must consist of lower case alphanumeric characters, '-' or '.', "
    "and must start and end with an alphanumeric character (e.g. 'example.com', regex used "
    r"for validation is '[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*')"
)


@dataclasses.dataclass
class FakeRequest:
    method: str
    path: str
    query: dict[str, str]
    data: Any


@dataclasses.dataclass
class FakeCluster:
    """
    The state of a fake K8s API: the namespaces and the stored objects.

    The fake mimics the real API's responses for the requests the gateway makes,
    including the Status bodies of the failures, byte-for-byte where it matters.
    """
    namespaces: dict[str, str] = dataclasses.field(default_factory=lambda: {
        'default': 'Active',
        'kube-system': 'Active',
        'test-ns': 'Active',
        'old-ns': 'Terminating',
    })
    objects: dict[tuple[str, str, str], dict[str, Any]] = dataclasses.field(default_factory=dict)
    requests: list[FakeRequest] = dataclasses.field(default_factory=list)


def status(code: int, reason: str, message: str, **details: Any) -> aiohttp.web.Response:
    return aiohttp.web.json_response({
        'kind': 'Status',
        'apiVersion': 'v1',
        'metadata': {},
        'status': 'Failure' if code >= 400 else 'Success',
        'message': message,
        'reason': reason,
        'details': details,
        'code': code,
    }, status=code)


def make_fake_api(cluster: FakeCluster) -> aiohttp.web.Application:

    async def remember(request: aiohttp.web.Request) -> Any:
        text = await request.text()
        data = await request.json() if text else None
        cluster.requests.append(FakeRequest(request.method, request.path, dict(request.query), data))
        return data

    async def list_namespaces(request: aiohttp.web.Request) -> aiohttp.web.Response:
        await remember(request)
        selector = request.query.get('fieldSelector')
        phases = cluster.namespaces.items()
        if selector is not None:
            key, value = selector.split('=', 1)
            assert key == 'status.phase'
            phases = [(name, phase) for name, phase in phases if phase == value]
        return aiohttp.web.json_response({
            'kind': 'NamespaceList',
            'apiVersion': 'v1',
            'metadata': {'resourceVersion': '100'},
            'items': [{'metadata': {'name': name}, 'status': {'phase': phase}}
                      for name, phase in phases],
        })

    async def create_obj(request: aiohttp.web.Request) -> aiohttp.web.Response:
        raw = await request.text()
        data = await remember(request)
        group, version, plural = (request.match_info[key] for key in ['group', 'version', 'plural'])
        namespace = request.match_info['namespace']
        kind = plural[:-1].capitalize()
        if not isinstance(data, dict) or not data.get('kind') or not data.get('apiVersion'):
            missing = 'Kind' if not isinstance(data, dict) or not data.get('kind') else 'apiVersion'
            return status(400, 'BadRequest',
                          f"{kind} in version \"{version}\" cannot be handled as a {kind}: "
                          f"unmarshalerDecoder: Object '{missing}' is missing in '{raw}', "
                          f"error found in #{len(raw)} byte of ...|{raw}|..., "
                          f"bigger context ...|{raw}|...")

        metadata = data.get('metadata') or {}
        if not isinstance(metadata, dict):
            return status(400, 'BadRequest',
                          f"{kind} in version \"{version}\" cannot be handled as a {kind}: "
                          f"json: cannot unmarshal {type(metadata).__name__} into Go struct field "
                          f"{kind}.metadata of type v1.ObjectMeta")

        name = metadata.get('name') or ''
        if not DNS1123_SUBDOMAIN.match(name):
            return status(422, 'Invalid',
                          f"{kind}.{group} \"{name}\" is invalid: metadata.name: "
                          f"Invalid value: \"{name}\": {DNS1123_MESSAGE}",
                          name=name, group=group, kind=kind)

        key = (plural, namespace, name)
        if key in cluster.objects:
            return status(409, 'AlreadyExists',
                          f"{plural}.{group} \"{name}\" already exists",
                          name=name, group=group, kind=plural)

        created = dict(data, metadata=dict(data['metadata'], namespace=namespace, uid=f'uid-{name}'))
        if request.query.get('dryRun') != 'All':
            cluster.objects[key] = created
        return aiohttp.web.json_response(created, status=201)

    async def list_objs(request: aiohttp.web.Request) -> aiohttp.web.Response:
        await remember(request)
        group, version, plural = (request.match_info[key] for key in ['group', 'version', 'plural'])
        namespace = request.match_info['namespace']
        kind = plural[:-1].capitalize()
        return aiohttp.web.json_response({
            'apiVersion': f'{group}/{version}',
            'kind': f'{kind}List',
            'metadata': {'continue': '', 'resourceVersion': '200'},
            'items': [obj for (p, ns, _), obj in cluster.objects.items()
                      if p == plural and ns == namespace],
        })

    async def delete_obj(request: aiohttp.web.Request) -> aiohttp.web.Response:
        await remember(request)
        group, plural, name = (request.match_info[key] for key in ['group', 'plural', 'name'])
        namespace = request.match_info['namespace']
        key = (plural, namespace, name)
        if key not in cluster.objects:
            return status(404, 'NotFound', f"{plural}.{group} \"{name}\" not found",
                          name=name, group=group, kind=plural)
        obj = cluster.objects.pop(key)
        return aiohttp.web.json_response({
            'kind': 'Status',
            'apiVersion': 'v1',
            'metadata': {},
            'status': 'Success',
            'details': {'name': name, 'group': group, 'kind': plural,
                        'uid': obj['metadata']['uid']},
        })

    objs_url = '/apis/{group}/{version}/namespaces/{namespace}/{plural}'
    app = aiohttp.web.Application()
    app.add_routes([
        aiohttp.web.get('/api/v1/namespaces', list_namespaces),
        aiohttp.web.post(objs_url, create_obj),
        aiohttp.web.get(objs_url, list_objs),
        aiohttp.web.delete(objs_url + '/{name}', delete_obj),
    ])
    return app


@pytest.fixture(autouse=True)
def _caplog_all_levels(caplog):
    caplog.set_level(0)


@pytest.fixture()
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture()
async def server_factory():
    """
    A factory to serve arbitrary aiohttp applications on a random local port.
    """
    servers: list[aiohttp.test_utils.TestServer] = []

    async def factory(app: aiohttp.web.Application) -> aiohttp.test_utils.TestServer:
        server = aiohttp.test_utils.TestServer(app)
        await server.start_server()
        servers.append(server)
        return server

    try:
        yield factory
    finally:
        for server in servers:
            with contextlib.suppress(Exception):
                await server.close()


@pytest.fixture()
async def fake_api(server_factory, cluster) -> aiohttp.test_utils.TestServer:
    return await server_factory(make_fake_api(cluster))


@pytest.fixture()
def settings() -> GatewaySettings:
    return make_settings(namespace='test-ns')


@pytest.fixture()
def info(fake_api) -> ConnectionInfo:
    return ConnectionInfo(server=str(fake_api.make_url('/')))


@pytest.fixture()
async def client(settings, info):
    async with CRDClient(settings=settings, info=info) as client:
        yield client


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    def assert_logs_fn(patterns, prohibited=()):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # If a later pattern matches before the 0th one, the 0th message is missing.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # The CLI & logging tests reconfigure the root logger; keep other tests unaffected.
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        yield
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
