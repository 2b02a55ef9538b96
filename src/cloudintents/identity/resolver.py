"""
Pod to service identity resolution.

Resolves a running Pod to the logical service it belongs to by walking its
Kubernetes ownership chain (Pod → ReplicaSet → Deployment, Pod → Job, ...).

Resolution order (first match wins):
1. Service name override annotation on the pod
2. Pod name, when the pod has no owner
3. Topmost supported owner reachable from the pod
4. For Jobs, optionally the first container's image name

Dots in the resolved name are replaced with underscores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from cloudintents.config.settings import Settings
from cloudintents.core.errors import (
    CloudIntentsError,
    ClusterReadError,
    ForbiddenError,
    PodNotFoundError,
)
from cloudintents.identity.cluster import ClusterReader
from cloudintents.identity.images import image_name
from cloudintents.identity.models import (
    FetchOutcome,
    FetchStatus,
    OwnerKind,
    ServiceIdentity,
)
from cloudintents.intents import ClientIntents
from cloudintents.logging import bind_context

# Guards against malformed ownership cycles
MAX_OWNER_DEPTH = 10


@dataclass(frozen=True)
class ResolverConfig:
    """Resolver behaviour switches."""

    service_name_override_annotation: str | None = None
    use_image_name_for_jobs: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> ResolverConfig:
        return cls(
            service_name_override_annotation=settings.service_name_override_annotation,
            use_image_name_for_jobs=settings.use_image_name_for_service_id_for_jobs,
        )


def _owner_reference(metadata: Any) -> Any | None:
    """Controller owner reference, or the first owner when none is flagged."""
    refs = getattr(metadata, "owner_references", None) or []
    for ref in refs:
        if getattr(ref, "controller", None):
            return ref
    return refs[0] if refs else None


class ServiceIdentityResolver:
    """Resolves pods and client intents to service identities."""

    def __init__(self, reader: ClusterReader, config: ResolverConfig | None = None) -> None:
        self.reader = reader
        self.config = config or ResolverConfig()

    def resolve_pod_to_service_identity(self, pod: Any) -> ServiceIdentity:
        """
        Resolve a pod to its service identity.

        Args:
            pod: V1Pod (or any object with the same metadata/spec shape)

        Returns:
            ServiceIdentity in the pod's namespace

        Raises:
            ClusterReadError: Owner read failed for a reason other than RBAC
        """
        metadata = pod.metadata
        namespace = metadata.namespace

        override = self._annotated_name(metadata)
        if override:
            return ServiceIdentity(name=override, namespace=namespace)

        owner = _owner_reference(metadata)
        if owner is None:
            return ServiceIdentity(name=_normalize(metadata.name), namespace=namespace)

        log = bind_context(pod=metadata.name, namespace=namespace)
        name, kind = self._resolve_owner(owner, namespace, log)

        if kind is OwnerKind.JOB and self.config.use_image_name_for_jobs:
            containers = (pod.spec.containers if pod.spec else None) or []
            if containers:
                # References like "registry/team/" carry no usable name
                name = image_name(containers[0].image or "") or name

        identity = ServiceIdentity(name=_normalize(name), namespace=namespace, owner_kind=kind)
        log.debug(
            "service_identity_resolved",
            service=identity.name,
            owner_kind=kind.value if kind else None,
        )
        return identity

    def resolve_client_intent_to_pod(self, client_intents: ClientIntents) -> Any:
        """
        Find a pod of the service declared by a ClientIntents object.

        Returns the first pod in list order; multiple matches are not
        disambiguated.

        Raises:
            PodNotFoundError: No pod matches the intents' label selector
        """
        label_selector = client_intents.build_pod_label_selector()
        pods = self.reader.list_pods(client_intents.namespace, label_selector)
        if not pods:
            raise PodNotFoundError(
                "No pod found for client intents",
                {
                    "service": client_intents.service_name,
                    "namespace": client_intents.namespace,
                    "label_selector": label_selector,
                },
            )
        return pods[0]

    def resolve_client_intent_to_service_identity(
        self, client_intents: ClientIntents
    ) -> ServiceIdentity:
        """Resolve the identity of the pods a ClientIntents object targets."""
        pod = self.resolve_client_intent_to_pod(client_intents)
        return self.resolve_pod_to_service_identity(pod)

    def _annotated_name(self, metadata: Any) -> str | None:
        key = self.config.service_name_override_annotation
        if not key:
            return None
        annotations = metadata.annotations or {}
        return annotations.get(key) or None

    def _fetch(self, kind: OwnerKind, name: str, namespace: str) -> FetchOutcome:
        try:
            return FetchOutcome.ok(self.reader.get(kind, name, namespace))
        except ForbiddenError as e:
            return FetchOutcome.forbidden(e)
        except Exception as e:
            return FetchOutcome.failed(e)

    def _resolve_owner(
        self, owner: Any, namespace: str, log: structlog.stdlib.BoundLogger
    ) -> tuple[str, OwnerKind | None]:
        """Walk up the ownership chain starting at the pod's owner reference."""
        immediate_kind = OwnerKind.parse(owner.kind)
        if immediate_kind is None:
            log.debug("owner_kind_unsupported", kind=owner.kind, owner=owner.name)
            return owner.name, None

        name, kind = owner.name, immediate_kind
        for _ in range(MAX_OWNER_DEPTH):
            outcome = self._fetch(kind, name, namespace)

            if outcome.status is FetchStatus.FORBIDDEN:
                # Fall back to the pod's own owner reference
                log.debug(
                    "owner_read_forbidden",
                    kind=kind.value,
                    owner=name,
                    fallback=owner.name,
                )
                return owner.name, immediate_kind

            if outcome.status is FetchStatus.ERROR:
                error = outcome.error
                if isinstance(error, CloudIntentsError):
                    raise error
                raise ClusterReadError(
                    f"Failed to read {kind.value} {name}: {error}",
                    {"kind": kind.value, "name": name, "namespace": namespace},
                ) from error

            obj = outcome.obj
            parent = _owner_reference(obj.metadata)
            parent_kind = OwnerKind.parse(parent.kind) if parent is not None else None
            if parent_kind is None:
                return obj.metadata.name, kind

            name, kind = parent.name, parent_kind

        return name, kind


def _normalize(name: str) -> str:
    return name.replace(".", "_")
