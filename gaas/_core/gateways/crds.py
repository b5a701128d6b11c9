"""
The gateway to the custom resources of one type in one namespace.

Every operation is a single request to the API, with no retries and no state
kept between the calls, except for the settings and the HTTP session.
All the faults are converted to :class:`failures.GaasRestApiError`.

Nothing is validated locally: neither the names, nor the bodies.
Whatever the API rejects is relayed to the caller exactly as the API said it.
"""
import asyncio
import collections.abc
import contextlib
import logging
from collections.abc import Iterator
from types import TracebackType

import aiohttp

from gaas._cogs.clients import auth, creating, deleting, errors, fetching
from gaas._cogs.configs import configuration
from gaas._cogs.structs import bodies, credentials, payloads, references
from gaas._core.actions import loggers
from gaas._core.gateways import failures

logger = logging.getLogger(__name__)

# Only the namespaces that can host the resources: not the terminating ones.
NAMESPACE_PARAMS = {'fieldSelector': 'status.phase=Active'}


@contextlib.contextmanager
def translated_errors() -> Iterator[None]:
    try:
        yield
    except errors.APIError as e:
        raise failures.from_api_error(e) from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise failures.from_transport_error(e) from e


class CRDClient:
    """
    The client for the namespaced custom resources (``Gaffer`` by default).

    It must be used as an async context manager, which opens and closes
    the HTTP session::

        async with CRDClient(settings=settings, info=info) as client:
            await client.create_crd(CreateResourceRequest(body))

    The client can be shared by many concurrent tasks of the same event loop.
    """

    def __init__(
            self,
            *,
            settings: configuration.GatewaySettings,
            info: credentials.ConnectionInfo,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.info = info
        self._context: auth.APIContext | None = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.resource!r} in {self.namespace!r} at {self.info.server}>'

    async def __aenter__(self) -> "CRDClient":
        self._context = auth.APIContext(self.info)
        return self

    async def __aexit__(
            self,
            exc_type: type[BaseException] | None,
            exc_val: BaseException | None,
            exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._context is not None:
            context, self._context = self._context, None
            await context.close()

    @property
    def context(self) -> auth.APIContext:
        if self._context is None:
            raise RuntimeError("The client is not opened: use it as `async with CRDClient(...)`.")
        return self._context

    @property
    def namespace(self) -> str:
        return self.settings.namespace

    @property
    def resource(self) -> references.Resource:
        return self.settings.resource

    async def list_namespaces(self) -> list[str]:
        """
        List the names of all active namespaces of the cluster.
        """
        with translated_errors():
            rsp = await fetching.list_objs(
                resource=references.NAMESPACES,
                namespace=None,
                params=NAMESPACE_PARAMS,
                context=self.context,
                settings=self.settings,
                logger=logger,
            )
        return [item['metadata']['name'] for item in rsp.get('items') or []]

    async def create_crd(self, request: payloads.CreateResourceRequest | None) -> None:
        """
        Create a custom resource in the configured namespace.
        """
        if request is None or request.body is None:
            raise failures.InvalidRequest(failures.MISSING_BODY_MESSAGE)

        body = request.body
        metadata = body.get('metadata') if isinstance(body, collections.abc.Mapping) else None
        name = metadata.get('name') if isinstance(metadata, collections.abc.Mapping) else None
        object_logger = loggers.ResourceLogger(resource=self.resource, namespace=self.namespace, name=name)
        with translated_errors():
            await creating.create_obj(
                resource=self.resource,
                namespace=self.namespace,
                body=request.body,
                params=request.params,
                context=self.context,
                settings=self.settings,
                logger=object_logger,
            )
        object_logger.info(f"Created {self.resource.kind or self.resource.plural}.")

    async def get_all_crd(self) -> bodies.RawList:
        """
        List all custom resources in the configured namespace, as the API returns them.
        """
        with translated_errors():
            return await fetching.list_objs(
                resource=self.resource,
                namespace=self.namespace,
                context=self.context,
                settings=self.settings,
                logger=logger,
            )

    async def delete_crd(self, name: str) -> None:
        """
        Delete a custom resource by name from the configured namespace.
        """
        # An empty name would turn the URL into the whole collection's URL.
        if not name:
            raise failures.InvalidRequest(failures.MISSING_NAME_MESSAGE)

        object_logger = loggers.ResourceLogger(resource=self.resource, namespace=self.namespace, name=name)
        with translated_errors():
            await deleting.delete_obj(
                resource=self.resource,
                namespace=self.namespace,
                name=name,
                context=self.context,
                settings=self.settings,
                logger=object_logger,
            )
        object_logger.info(f"Deleted {self.resource.kind or self.resource.plural}.")
