"""
All configuration flags, options, settings to fine-tune the gateway.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it):
the custom resource to operate on, and the networking timeouts.

The settings are immutable once constructed: the gateway client keeps them
for its whole lifetime. They are constructed either directly, or via
:func:`make_settings`, which validates the values and fails immediately
on the incomplete or invalid configurations, not on the first request.
"""
import dataclasses
import os
from collections.abc import Mapping
from typing import Any

import yaml

from gaas._cogs.structs import references


class ConfigurationError(ValueError):
    """ Raised when the settings are incomplete or invalid. """


@dataclasses.dataclass(frozen=True)
class ResourceSettings:
    """
    The coordinates of the custom resource type served by the gateway.
    """

    group: str = references.DEFAULT_GROUP
    """ The API group of the custom resource, e.g. ``"gchq.gov.uk"``. """

    version: str = references.DEFAULT_VERSION
    """ The API version of the custom resource, e.g. ``"v1"``. """

    plural: str = references.DEFAULT_PLURAL
    """ The plural name of the custom resource, e.g. ``"gaffers"``. """

    kind: str = references.DEFAULT_KIND
    """ The kind of the custom resource, e.g. ``"Gaffer"``. Used only for manifests. """

    @property
    def resource(self) -> references.Resource:
        return references.Resource(self.group, self.version, self.plural, kind=self.kind)


@dataclasses.dataclass(frozen=True)
class NetworkingSettings:

    request_timeout: float | None = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole request to the API (in seconds), ``None`` for none.
    """

    connect_timeout: float | None = None
    """
    A timeout for establishing a connection to the API (in seconds).
    ``None`` means that only the whole request's timeout applies.
    """


@dataclasses.dataclass(frozen=True)
class GatewaySettings:
    namespace: str
    resources: ResourceSettings = dataclasses.field(default_factory=ResourceSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)

    @property
    def resource(self) -> references.Resource:
        return self.resources.resource


# The flat names as used in the config files and CLI options.
_RESOURCE_KEYS = frozenset(field.name for field in dataclasses.fields(ResourceSettings))
_NETWORKING_KEYS = frozenset(field.name for field in dataclasses.fields(NetworkingSettings))
KNOWN_KEYS = frozenset({'namespace'}) | _RESOURCE_KEYS | _NETWORKING_KEYS


def make_settings(**values: Any) -> GatewaySettings:
    """
    Build the settings from the flat values, and validate them.

    The ``namespace`` is required. All other values have defaults.
    Unknown keys are rejected (most likely, they are typos).
    """
    unknown = set(values) - KNOWN_KEYS
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    namespace = values.get('namespace')
    if not isinstance(namespace, str) or not namespace:
        raise ConfigurationError("The namespace must be set to a non-empty string.")

    for key in _RESOURCE_KEYS:
        value = values.get(key)
        if key in values and (not isinstance(value, str) or not value):
            raise ConfigurationError(f"The {key} must be a non-empty string, got {value!r}.")

    for key in _NETWORKING_KEYS:
        value = values.get(key)
        if value is not None and (isinstance(value, bool) or
                                  not isinstance(value, (int, float)) or value <= 0):
            raise ConfigurationError(f"The {key} must be a positive number or None, got {value!r}.")

    return GatewaySettings(
        namespace=namespace,
        resources=ResourceSettings(**{key: values[key] for key in _RESOURCE_KEYS if key in values}),
        networking=NetworkingSettings(**{key: values[key] for key in _NETWORKING_KEYS if key in values}),
    )


def load_settings(
        path: str | os.PathLike[str] | None = None,
        *,
        defaults: Mapping[str, Any] | None = None,
        **overrides: Any,
) -> GatewaySettings:
    """
    Load the flat settings from a YAML file, if given, and apply the overrides.

    The defaults go below the file's values, e.g. the namespace of the login
    context, which applies only when neither the file nor the options set one.

    The overrides with ``None`` values are ignored, so that the unset CLI options
    do not overwrite the values from the file.
    """
    values: dict[str, Any] = {key: val for key, val in (defaults or {}).items() if val is not None}
    if path is not None:
        with open(path, encoding='utf-8') as f:
            data = yaml.safe_load(f.read()) or {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"The config file must contain a mapping: {path}")
        values.update(data)
    values.update({key: val for key, val in overrides.items() if val is not None})
    return make_settings(**values)
