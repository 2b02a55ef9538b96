"""
Identity models for Pod to service resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from cloudintents.naming import formatted_identity


class OwnerKind(str, Enum):
    """Kubernetes owner kinds the resolver knows how to fetch."""

    REPLICA_SET = "ReplicaSet"
    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    DAEMON_SET = "DaemonSet"
    JOB = "Job"
    CRON_JOB = "CronJob"

    @classmethod
    def parse(cls, kind: str | None) -> OwnerKind | None:
        """Return the member for a Kind string, or None if unsupported."""
        for member in cls:
            if member.value == kind:
                return member
        return None


@dataclass(frozen=True)
class ServiceIdentity:
    """Logical identity of a workload."""

    name: str
    namespace: str

    # Kind of the object the name came from (None for pod name / annotation)
    owner_kind: OwnerKind | None = None

    def formatted_name(self) -> str:
        """Label-safe, hash-suffixed form of name and namespace."""
        return formatted_identity(self.name, self.namespace)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "owner_kind": self.owner_kind.value if self.owner_kind else None,
        }


class FetchStatus(str, Enum):
    OK = "ok"
    FORBIDDEN = "forbidden"
    ERROR = "error"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of reading an owner object from the cluster."""

    status: FetchStatus
    obj: Any = None
    error: Exception | None = None

    @classmethod
    def ok(cls, obj: Any) -> FetchOutcome:
        return cls(status=FetchStatus.OK, obj=obj)

    @classmethod
    def forbidden(cls, error: Exception) -> FetchOutcome:
        return cls(status=FetchStatus.FORBIDDEN, error=error)

    @classmethod
    def failed(cls, error: Exception) -> FetchOutcome:
        return cls(status=FetchStatus.ERROR, error=error)
