from collections.abc import Mapping
from typing import Any

from gaas._cogs.clients import api, auth
from gaas._cogs.configs import configuration
from gaas._cogs.helpers import typedefs
from gaas._cogs.structs import bodies, references


async def create_obj(
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        resource: references.Resource,
        namespace: references.Namespace,
        body: Mapping[str, Any],
        params: Mapping[str, str | None] | None = None,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Create a resource from the body as it is.

    Unlike the usual K8s clients, the body is not completed with the name
    and the namespace: it is sent exactly as provided by the caller,
    and the API alone decides if it is valid or not.
    """
    created_body: bodies.RawBody = await api.post(
        url=resource.get_url(namespace=namespace, params=params),
        payload=body,
        context=context,
        settings=settings,
        logger=logger,
    )
    return created_body
