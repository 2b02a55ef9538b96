"""
Service identity resolution for Kubernetes workloads.

Maps a running Pod to a stable logical service identity by walking its
ownership chain with override and fallback rules.
"""

from cloudintents.identity.cluster import ClusterReader, KubernetesClusterReader
from cloudintents.identity.images import image_name
from cloudintents.identity.models import (
    FetchOutcome,
    FetchStatus,
    OwnerKind,
    ServiceIdentity,
)
from cloudintents.identity.resolver import (
    MAX_OWNER_DEPTH,
    ResolverConfig,
    ServiceIdentityResolver,
)

__all__ = [
    # Models
    "ServiceIdentity",
    "OwnerKind",
    "FetchOutcome",
    "FetchStatus",
    # Cluster access
    "ClusterReader",
    "KubernetesClusterReader",
    # Resolver
    "ServiceIdentityResolver",
    "ResolverConfig",
    "MAX_OWNER_DEPTH",
    "image_name",
]
