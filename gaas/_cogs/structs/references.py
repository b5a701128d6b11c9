import dataclasses
import urllib.parse
from collections.abc import Mapping

# An isolated type to mark namespaces as strings (or None for cluster-wide requests).
Namespace = str | None

DEFAULT_GROUP = 'gchq.gov.uk'
DEFAULT_VERSION = 'v1'
DEFAULT_PLURAL = 'gaffers'
DEFAULT_KIND = 'Gaffer'


def quote_segment(segment: str) -> str:
    """ Escape one path segment of a URL, including the slashes and the dot-segments. """
    if segment in ('.', '..'):
        return segment.replace('.', '%2E')
    return urllib.parse.quote(segment, safe='')


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    A reference to a very specific custom or built-in resource kind.

    It is used to form the K8s API URLs. Generally, K8s API only needs
    an API group, an API version, and a plural name of the resource.
    The kind and the scope are remembered for building the manifests.
    """

    group: str
    """
    The resource's API group; e.g. ``"gchq.gov.uk"``, ``"apps"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1beta1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"gaffers"``, ``"namespaces"``.
    It is used as an API endpoint, together with API group & version.
    """

    kind: str | None = None
    """
    The resource's kind (as in YAML files); e.g. ``"Gaffer"``, ``"Namespace"``.
    """

    namespaced: bool = True
    """
    Whether the resource is namespaced (``True``) or cluster-scoped (``False``).
    """

    def __hash__(self) -> int:
        return hash((self.group, self.version, self.plural))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            self_tuple = (self.group, self.version, self.plural)
            other_tuple = (other.group, other.version, other.plural)
            return self_tuple == other_tuple
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def name(self) -> str:
        """ The name as used by K8s for CRDs & in error messages: ``gaffers.gchq.gov.uk``. """
        return f'{self.plural}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        """ The ``apiVersion`` field of the objects: ``gchq.gov.uk/v1``, or ``v1`` for core. """
        return f'{self.group}/{self.version}' if self.group else self.version

    def get_url(
            self,
            *,
            server: str | None = None,
            namespace: Namespace = None,
            name: str | None = None,
            subresource: str | None = None,
            params: Mapping[str, str] | None = None,
    ) -> str:
        """
        Build a URL to be used with K8s API.

        If the namespace is not set, a cluster-wide URL is returned.
        For cluster-scoped resources, the namespace is ignored.

        If the name is not set, the URL for the resource list is returned.
        Otherwise (if set), the URL for the individual resource is returned.

        All path segments are escaped, so that the names cannot address other
        endpoints (e.g. with slashes, question marks, or dot-segments).

        Params go to the query parameters (``?param1=value1&param2=value2...``).
        The params with ``None`` values are omitted.
        """
        if subresource is not None and name is None:
            raise ValueError("Subresources can be used only with specific resources by their name.")
        if not self.namespaced and namespace is not None:
            raise ValueError("Specific namespaces are not supported for cluster-scoped resources.")
        if self.namespaced and namespace is None and name is not None:
            raise ValueError("Specific namespaces are required for specific namespaced resources.")

        prefix = '/api' if self.group == '' and self.version == 'v1' else '/apis'
        parts: list[str | None] = [
            self.group,
            self.version,
            'namespaces' if self.namespaced and namespace is not None else None,
            namespace if self.namespaced and namespace is not None else None,
            self.plural,
            name,
            subresource,
        ]

        params = {key: val for key, val in (params or {}).items() if val is not None}
        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([prefix] + [quote_segment(part) for part in parts if part])
        url = path + ('?' if query else '') + query
        return url if server is None else server.rstrip('/') + '/' + url.lstrip('/')


# Some predefined API endpoints that we use in the gateway.
NAMESPACES = Resource('', 'v1', 'namespaces', kind='Namespace', namespaced=False)
CRDS = Resource('apiextensions.k8s.io', 'v1', 'customresourcedefinitions',
                kind='CustomResourceDefinition', namespaced=False)
GAFFERS = Resource(DEFAULT_GROUP, DEFAULT_VERSION, DEFAULT_PLURAL, kind=DEFAULT_KIND)
