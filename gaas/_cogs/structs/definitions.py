"""
The declarative definitions needed by the gateway in the cluster.

The custom resource definition (CRD) declares the ``Gaffer`` resource type:
a free-form spec (the values of the Gaffer Helm chart to override), and
a status sub-resource with the REST API status and the list of problems,
both reported by the Gaffer controller.

The status role allows the controller's service account to update
the status sub-resource of the graphs.

These are plain manifests for ``kubectl apply -f``, not Helm templates.
"""
from collections.abc import Iterable, Mapping
from typing import Any

import yaml

from gaas._cogs.structs import references


def build_crd(
        resource: references.Resource = references.GAFFERS,
        *,
        labels: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    kind = resource.kind or references.DEFAULT_KIND
    return {
        'apiVersion': references.CRDS.api_version,
        'kind': references.CRDS.kind,
        'metadata': {
            'name': resource.name,
            'labels': dict(labels or {}),
        },
        'spec': {
            'group': resource.group,
            'names': {
                'kind': kind,
                'listKind': f'{kind}List',
                'plural': resource.plural,
                'singular': kind.lower(),
            },
            'scope': 'Namespaced' if resource.namespaced else 'Cluster',
            'versions': [{
                'name': resource.version,
                'served': True,
                'storage': True,
                'schema': {
                    'openAPIV3Schema': {
                        'type': 'object',
                        'properties': {
                            'spec': {
                                'description': 'The Values of the Gaffer Helm chart that you wish to overwrite.',
                                'type': 'object',
                                'x-kubernetes-preserve-unknown-fields': True,
                            },
                            'status': {
                                'description': f'Status defines the observed state of {kind}',
                                'type': 'object',
                                'x-kubernetes-preserve-unknown-fields': True,
                                'properties': {
                                    'problems': {
                                        'type': 'array',
                                        'items': {'type': 'string'},
                                        'description': 'Issues encountered in deployments',
                                    },
                                    'restApiStatus': {
                                        'type': 'string',
                                        'description': 'The Current Status of the Gaffer REST API',
                                    },
                                },
                            },
                        },
                    },
                },
                'subresources': {
                    'status': {},
                },
                'additionalPrinterColumns': [
                    {
                        'name': 'REST API Status',
                        'jsonPath': '.status.restApiStatus',
                        'type': 'string',
                    },
                    {
                        'name': 'Age',
                        'jsonPath': '.metadata.creationTimestamp',
                        'type': 'date',
                    },
                ],
            }],
        },
    }


def build_status_role(
        resource: references.Resource = references.GAFFERS,
        *,
        name: str,
        namespace: str,
        service_account: str,
        clusterwide: bool = False,
        labels: Mapping[str, str] | None = None,
) -> list[dict[str, Any]]:
    role_kind = 'ClusterRole' if clusterwide else 'Role'
    binding_kind = 'ClusterRoleBinding' if clusterwide else 'RoleBinding'
    metadata: dict[str, Any] = {'name': f'{name}-graph-status', 'labels': dict(labels or {})}
    if not clusterwide:
        metadata['namespace'] = namespace
    role = {
        'apiVersion': 'rbac.authorization.k8s.io/v1',
        'kind': role_kind,
        'metadata': dict(metadata),
        'rules': [{
            'apiGroups': [resource.group],
            'resources': [f'{resource.plural}/status'],
            'verbs': ['get', 'update'],
        }],
    }
    binding = {
        'apiVersion': 'rbac.authorization.k8s.io/v1',
        'kind': binding_kind,
        'metadata': dict(metadata),
        'subjects': [{
            'kind': 'ServiceAccount',
            'name': service_account,
            'namespace': namespace,
        }],
        'roleRef': {
            'kind': role_kind,
            'name': metadata['name'],
            'apiGroup': 'rbac.authorization.k8s.io',
        },
    }
    return [role, binding]


def dump_manifests(manifests: Iterable[Mapping[str, Any]]) -> str:
    return yaml.safe_dump_all([dict(manifest) for manifest in manifests],
                              sort_keys=False, default_flow_style=False)
