from collections.abc import Mapping

from gaas._cogs.clients import api, auth
from gaas._cogs.configs import configuration
from gaas._cogs.helpers import typedefs
from gaas._cogs.structs import bodies, references


async def list_objs(
        *,
        context: auth.APIContext,
        settings: configuration.GatewaySettings,
        resource: references.Resource,
        namespace: references.Namespace,
        params: Mapping[str, str | None] | None = None,
        logger: typedefs.Logger,
) -> bodies.RawList:
    """
    List the objects of specific resource type, and return the raw list.

    The cluster-scoped call is used if the resource itself is cluster-scoped,
    or if the namespace is not specified. Otherwise, the namespace-scoped call
    is used.

    The items are completed with their ``kind`` & ``apiVersion``, which
    the API omits from the listed items, but declares once for the list.
    """
    rsp: bodies.RawList = await api.get(
        url=resource.get_url(namespace=namespace, params=params),
        context=context,
        settings=settings,
        logger=logger,
    )

    for item in rsp.get('items') or []:
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])

    return rsp
