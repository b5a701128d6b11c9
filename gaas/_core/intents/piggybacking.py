"""
Rudimentary login methods to get the credentials for the cluster API.

The gateway is not a client library, and avoids bringing too much logic
for proper authentication, especially all the complex auth-providers.
Instead, it reads the basic credentials from the well-known places:
the pod's service account, the kubeconfig files, or the official client
library (if installed), and uses them for its own requests.

The login methods are registered by name in :data:`LOGIN_METHODS`, and are
selected by that name from the configuration (e.g. the CLI's ``--login``).

.. seealso::
    :mod:`credentials` and :class:`auth.APIContext`.
"""
import logging
import os
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import yaml

from gaas._cogs.helpers import typedefs
from gaas._cogs.structs import credentials

logger = logging.getLogger(__name__)

LoginFn = Callable[..., credentials.ConnectionInfo | None]

# As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
SERVICE_ACCOUNT_TOKEN_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/token'
SERVICE_ACCOUNT_NAMESPACE_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/namespace'
SERVICE_ACCOUNT_CA_PATH = '/var/run/secrets/kubernetes.io/serviceaccount/ca.crt'


def login_via_client(
        *,
        logger: typedefs.Logger,
        **_: Any,
) -> credentials.ConnectionInfo | None:
    """
    Login via the official client library, if it is installed.

    We do not even try to understand how it works and why. Just load it,
    and extract the results -- with all the auth-providers it supports.
    """

    # Keep imports in the function, as the library is an optional dependency.
    try:
        import kubernetes.client
        import kubernetes.config
    except ImportError:
        return None

    try:
        kubernetes.config.load_incluster_config()  # cluster env vars
        logger.debug("Client is configured in cluster with service account.")
    except kubernetes.config.ConfigException:
        try:
            kubernetes.config.load_kube_config()  # developer's config files
            logger.debug("Client is configured via kubeconfig file.")
        except kubernetes.config.ConfigException as e:
            raise credentials.LoginError("Cannot authenticate the client library "
                                         "neither in-cluster, nor via kubeconfig.") from e

    config = kubernetes.client.Configuration.get_default_copy()

    # For auth-providers, this method is monkey-patched with the auth-provider's one.
    # We need the actual auth-provider's token, so we call it instead of accessing api_key.
    header: str | None = config.get_api_key_with_prefix('authorization')
    parts: Sequence[str] = header.split(' ', 1) if header else []
    scheme, token = ((None, None) if len(parts) == 0 else
                     (None, parts[0]) if len(parts) == 1 else
                     (parts[0], parts[1]))  # RFC-7235, Appendix C.

    # Note: kubernetes client has no concept of a "current" context's namespace.
    return credentials.ConnectionInfo(
        server=config.host,
        ca_path=config.ssl_ca_cert,  # can be a temporary file
        insecure=not config.verify_ssl,
        username=config.username or None,  # an empty string when not defined
        password=config.password or None,  # an empty string when not defined
        scheme=scheme,
        token=token,
        certificate_path=config.cert_file,  # can be a temporary file
        private_key_path=config.key_file,  # can be a temporary file
    )


def has_service_account() -> bool:
    return os.path.exists(SERVICE_ACCOUNT_TOKEN_PATH)


def login_with_service_account(**_: Any) -> credentials.ConnectionInfo | None:
    """
    A minimalistic login handler that can get raw data from a service account.

    Authentication capabilities can be limited to keep the code short & simple.
    No parsing or sophisticated multi-step token retrieval is performed.
    """
    if os.path.exists(SERVICE_ACCOUNT_TOKEN_PATH):
        with open(SERVICE_ACCOUNT_TOKEN_PATH, encoding='utf-8') as f:
            token = f.read().strip()

        namespace: str | None = None
        if os.path.exists(SERVICE_ACCOUNT_NAMESPACE_PATH):
            with open(SERVICE_ACCOUNT_NAMESPACE_PATH, encoding='utf-8') as f:
                namespace = f.read().strip()

        return credentials.ConnectionInfo(
            server='https://kubernetes.default.svc',
            ca_path=SERVICE_ACCOUNT_CA_PATH if os.path.exists(SERVICE_ACCOUNT_CA_PATH) else None,
            token=token or None,
            default_namespace=namespace or None,
        )
    else:
        return None


def has_kubeconfig() -> bool:
    env_var_set = bool(os.environ.get('KUBECONFIG'))
    file_exists = os.path.exists(os.path.expanduser('~/.kube/config'))
    return env_var_set or file_exists


def login_with_kubeconfig(**_: Any) -> credentials.ConnectionInfo | None:
    """
    A minimalistic login handler that can get raw data from a kubeconfig file.

    Authentication capabilities can be limited to keep the code short & simple.
    No parsing or sophisticated multi-step token retrieval is performed.
    """

    # As per https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    kubeconfig = os.environ.get('KUBECONFIG')
    if not kubeconfig and os.path.exists(os.path.expanduser('~/.kube/config')):
        kubeconfig = '~/.kube/config'
    if not kubeconfig:
        return None

    paths = [path.strip() for path in kubeconfig.split(os.pathsep)]
    paths = [os.path.expanduser(path) for path in paths if path]

    # As prescribed: if the file is absent or non-deserialisable, then fail. The first value wins.
    current_context: str | None = None
    contexts: dict[Any, Any] = {}
    clusters: dict[Any, Any] = {}
    users: dict[Any, Any] = {}
    for path in paths:

        with open(path, encoding='utf-8') as f:
            config = yaml.safe_load(f.read()) or {}

        if current_context is None:
            current_context = config.get('current-context')
        for item in config.get('contexts', []):
            if item['name'] not in contexts:
                contexts[item['name']] = item.get('context') or {}
        for item in config.get('clusters', []):
            if item['name'] not in clusters:
                clusters[item['name']] = item.get('cluster') or {}
        for item in config.get('users', []):
            if item['name'] not in users:
                users[item['name']] = item.get('user') or {}

    # Once fully parsed, use the current context only.
    if current_context is None:
        raise credentials.LoginError('Current context is not set in kubeconfigs.')
    context = contexts[current_context]
    cluster = clusters[context['cluster']]
    user = users[context['user']]

    # Unlike the client library's login, we do not make a fake API request to refresh the token.
    provider_token = user.get('auth-provider', {}).get('config', {}).get('access-token')

    # Map the retrieved fields into the credentials object.
    return credentials.ConnectionInfo(
        server=cluster.get('server'),
        ca_path=cluster.get('certificate-authority'),
        ca_data=cluster.get('certificate-authority-data'),
        insecure=cluster.get('insecure-skip-tls-verify'),
        certificate_path=user.get('client-certificate'),
        certificate_data=user.get('client-certificate-data'),
        private_key_path=user.get('client-key'),
        private_key_data=user.get('client-key-data'),
        username=user.get('username'),
        password=user.get('password'),
        token=user.get('token') or provider_token,
        default_namespace=context.get('namespace'),
    )


def login_automatically(**kwargs: Any) -> credentials.ConnectionInfo | None:
    """
    Use the service account inside of the cluster, or the kubeconfig outside.
    """
    if has_service_account():
        return login_with_service_account(**kwargs)
    elif has_kubeconfig():
        return login_with_kubeconfig(**kwargs)
    else:
        return None


LOGIN_METHODS: Mapping[str, LoginFn] = {
    'auto': login_automatically,
    'client': login_via_client,
    'kubeconfig': login_with_kubeconfig,
    'service-account': login_with_service_account,
}


def login(
        method: str = 'auto',
        *,
        methods: Mapping[str, LoginFn] = LOGIN_METHODS,
) -> credentials.ConnectionInfo:
    """
    Resolve the login method by its name and get the credentials with it.

    Fails on unknown methods, and when the method finds no credentials at all.
    """
    try:
        fn = methods[method]
    except KeyError:
        known = ', '.join(sorted(methods))
        raise credentials.LoginError(f"Unknown login method: {method!r}. Use one of: {known}.") from None

    info = fn(logger=logger)
    if info is None:
        raise credentials.LoginError(f"No credentials were found by the login method {method!r}.")
    logger.debug(f"Logged in with {method!r} to {info.server}")
    return info
