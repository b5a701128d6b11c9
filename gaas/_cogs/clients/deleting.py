from collections.abc import Mapping
from typing import Any

from gaas._cogs.clients import api, auth
from gaas._cogs.configs import configuration
from gaas._cogs.helpers import typedefs
from gaas._cogs.structs import references


async def delete_obj(
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        params: Mapping[str, str | None] | None = None,
        logger: typedefs.Logger,
) -> Mapping[str, Any]:
    """
    Delete a resource by its name.

    Returns whatever the API returns: either the ``Status`` of the deletion,
    or the deleted object itself if it has finalizers and is only marked
    for deletion. Absent objects are reported as :class:`APINotFoundError`.
    """
    rsp: Mapping[str, Any] = await api.delete(
        url=resource.get_url(namespace=namespace, name=name, params=params),
        context=context,
        settings=settings,
        logger=logger,
    )
    return rsp
