"""
GCP IAM partial policy models.

Mirrors the Config Connector IAMPartialPolicy resource closely enough for a
downstream collaborator to apply it to the cluster.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

API_VERSION = "iam.cnrm.cloud.google.com/v1beta1"
KIND = "IAMPartialPolicy"


@dataclass(frozen=True)
class ResourceRef:
    """Resource the policy applies to."""

    kind: str
    external: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "external": self.external}


@dataclass(frozen=True)
class PolicyCondition:
    title: str
    expression: str


@dataclass
class PolicyBinding:
    """Grant of one role to a set of members, optionally conditional."""

    role: str
    members: list[str]
    condition: PolicyCondition | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "role": self.role,
            "members": [{"member": member} for member in self.members],
        }
        if self.condition is not None:
            result["condition"] = {
                "title": self.condition.title,
                "expression": self.condition.expression,
            }
        return result


@dataclass
class IAMPolicyDocument:
    """IAM partial policy produced for one client service."""

    name: str
    namespace: str
    resource_ref: ResourceRef
    bindings: list[PolicyBinding] = field(default_factory=list)

    def to_manifest(self) -> dict[str, Any]:
        """Render as an IAMPartialPolicy Kubernetes object."""
        return {
            "apiVersion": API_VERSION,
            "kind": KIND,
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "resourceRef": self.resource_ref.to_dict(),
                "bindings": [binding.to_dict() for binding in self.bindings],
            },
        }
