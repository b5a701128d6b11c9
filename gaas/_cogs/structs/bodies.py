"""
All the structures coming from/to the Kubernetes API.

The gateway treats the resources as opaque structured payloads: it passes
them through, and does not inspect them except for a few well-known fields.
The type definitions are detailed only to the level used by the gateway.
"""
from collections.abc import Mapping
from typing import Any

from typing_extensions import TypedDict


class RawMeta(TypedDict, total=False):
    name: str
    namespace: str
    uid: str
    resourceVersion: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    # "continue" is a keyword, so it is not declared; it is accessed via .get() anyway.


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: list[RawBody]
