"""
The main GaaS module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the gateway's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from gaas._cogs.configs.configuration import (
    ConfigurationError,
    GatewaySettings,
    NetworkingSettings,
    ResourceSettings,
    load_settings,
    make_settings,
)
from gaas._cogs.helpers.typedefs import (
    Logger,
)
from gaas._cogs.helpers.versions import (
    version as __version__,
)
from gaas._cogs.structs.bodies import (
    RawBody,
    RawList,
)
from gaas._cogs.structs.credentials import (
    LoginError,
    ConnectionInfo,
)
from gaas._cogs.structs.definitions import (
    build_crd,
    build_status_role,
    dump_manifests,
)
from gaas._cogs.structs.graphs import (
    Graph,
    GraphInfo,
    build_body,
    parse_list,
)
from gaas._cogs.structs.payloads import (
    CreateResourceRequest,
)
from gaas._cogs.structs.references import (
    Resource,
    GAFFERS,
)
from gaas._core.engines.rest import (
    make_app,
    serve,
)
from gaas._core.gateways.crds import (
    CRDClient,
)
from gaas._core.gateways.failures import (
    GaasRestApiError,
    TransportFailure,
    RemoteRejection,
    InvalidRequest,
)
from gaas._core.intents.piggybacking import (
    login,
    LOGIN_METHODS,
)

__all__ = [
    'ConfigurationError',
    'GatewaySettings',
    'NetworkingSettings',
    'ResourceSettings',
    'load_settings',
    'make_settings',
    'Logger',
    'RawBody',
    'RawList',
    'LoginError',
    'ConnectionInfo',
    'build_crd',
    'build_status_role',
    'dump_manifests',
    'Graph',
    'GraphInfo',
    'build_body',
    'parse_list',
    'CreateResourceRequest',
    'Resource',
    'GAFFERS',
    'make_app',
    'serve',
    'CRDClient',
    'GaasRestApiError',
    'TransportFailure',
    'RemoteRejection',
    'InvalidRequest',
    'login',
    'LOGIN_METHODS',
]
