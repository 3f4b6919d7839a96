"""Hive resources: the ClusterDeployment we watch and the SyncSet we create."""

from dataclasses import dataclass, field
from typing import Any

from splunk_token_operator.config import HIVE_GROUP, HIVE_VERSION
from splunk_token_operator.models.meta import Resource


@dataclass
class ClusterDeployment(Resource):
    """A managed cluster. Only its labels are of interest to the operator."""

    API_VERSION = f"{HIVE_GROUP}/{HIVE_VERSION}"
    KIND = "ClusterDeployment"
    PLURAL = "clusterdeployments"

    spec: dict[str, Any] = field(default_factory=dict)

    def _body_to_dict(self) -> dict[str, Any]:
        return {"spec": dict(self.spec)}

    @classmethod
    def _body_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {"spec": dict(data.get("spec") or {})}


@dataclass
class SecretMapping:
    """Copies a secret from the hub namespace onto the managed cluster."""

    source_name: str
    source_namespace: str
    target_name: str
    target_namespace: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceRef": {"name": self.source_name, "namespace": self.source_namespace},
            "targetRef": {"name": self.target_name, "namespace": self.target_namespace},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SecretMapping":
        source = data.get("sourceRef") or {}
        target = data.get("targetRef") or {}
        return cls(
            source_name=source.get("name", ""),
            source_namespace=source.get("namespace", ""),
            target_name=target.get("name", ""),
            target_namespace=target.get("namespace", ""),
        )


@dataclass
class SyncSet(Resource):
    """Pushes secrets from the hub to the clusters it references."""

    API_VERSION = f"{HIVE_GROUP}/{HIVE_VERSION}"
    KIND = "SyncSet"
    PLURAL = "syncsets"

    cluster_deployment_refs: list[str] = field(default_factory=list)
    secret_mappings: list[SecretMapping] = field(default_factory=list)
    resource_apply_mode: str = "Sync"

    def _body_to_dict(self) -> dict[str, Any]:
        return {
            "spec": {
                "clusterDeploymentRefs": [
                    {"name": name} for name in self.cluster_deployment_refs
                ],
                "resourceApplyMode": self.resource_apply_mode,
                "secretMappings": [m.to_dict() for m in self.secret_mappings],
            }
        }

    @classmethod
    def _body_from_dict(cls, data: dict[str, Any]) -> dict[str, Any]:
        spec = data.get("spec") or {}
        return {
            "cluster_deployment_refs": [
                ref["name"] for ref in spec.get("clusterDeploymentRefs") or []
            ],
            "secret_mappings": [
                SecretMapping.from_dict(m) for m in spec.get("secretMappings") or []
            ],
            "resource_apply_mode": spec.get("resourceApplyMode", "Sync"),
        }
