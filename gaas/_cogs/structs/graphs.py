"""
Graphs as seen by the users of the REST façade, and their mapping to/from
the ``Gaffer`` custom resources as stored in the cluster.

A graph's id becomes the object's name (so it must be a DNS-1123 subdomain,
but this is checked by the API, not here). The description and the id
are stored in the object's spec, where the Gaffer controller expects them.
"""
import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

from gaas._cogs.structs import bodies, references


@dataclasses.dataclass(frozen=True)
class Graph:
    graph_id: str
    description: str | None = None


@dataclasses.dataclass(frozen=True)
class GraphInfo:
    """ A graph as reported back from the cluster, with its observed status. """
    graph_id: str
    description: str | None = None
    status: str | None = None
    problems: Sequence[str] = ()

    def as_json(self) -> dict[str, Any]:
        return {
            'graphId': self.graph_id,
            'description': self.description,
            'status': self.status,
            'problems': list(self.problems),
        }


def build_body(
        graph: Graph,
        *,
        resource: references.Resource = references.GAFFERS,
) -> bodies.RawBody:
    return {
        'apiVersion': resource.api_version,
        'kind': resource.kind or references.DEFAULT_KIND,
        'metadata': {'name': graph.graph_id},
        'spec': {
            'graph': {
                'config': {
                    'graphId': graph.graph_id,
                    'description': graph.description,
                },
            },
        },
    }


def parse_body(body: Mapping[str, Any]) -> GraphInfo:
    # Objects can be created by other tools than us, so every field is optional.
    name = body.get('metadata', {}).get('name')
    spec = body.get('spec') or {}
    config = (spec.get('graph') or {}).get('config') or {}
    status = body.get('status') or {}
    return GraphInfo(
        graph_id=name or config.get('graphId'),
        description=config.get('description'),
        status=status.get('restApiStatus'),
        problems=tuple(status.get('problems') or ()),
    )


def parse_list(rsp: Mapping[str, Any]) -> list[GraphInfo]:
    return [parse_body(item) for item in rsp.get('items') or []]
