"""
Deterministic resource name generation under length limits.

Cloud and Kubernetes identifiers have different maximum lengths. Names are
composed from readable parts and, when too long, truncated with a short
hash of the full original name appended so that two long names sharing a
prefix stay distinct.

Examples:
    truncate_hash_name("ci-prod-checkout", 30) → "ci-prod-checkout"
    truncate_hash_name("ci-my-cluster-production-checkout-service", 30)
        → "ci-my-cluster-productio-" followed by 6 hex chars
"""

from __future__ import annotations

import hashlib

MAX_K8S_NAME_LENGTH = 250
MAX_DISPLAY_NAME_LENGTH = 100
MAX_GCP_NAME_LENGTH = 30
MAX_K8S_LABEL_LENGTH = 63

HASH_SUFFIX_LENGTH = 6

# Per-part limit used by formatted_identity()
_IDENTITY_PART_LENGTH = 20


def truncate_hash_name(name: str, max_len: int) -> str:
    """
    Truncate a name to max_len, appending a hash of the original when cut.

    Names that already fit are returned unchanged, so applying the function
    twice with the same limit gives the same result.

    Args:
        name: Full candidate name
        max_len: Maximum allowed length

    Returns:
        Name of at most max_len characters
    """
    if len(name) <= max_len:
        return name

    if max_len <= HASH_SUFFIX_LENGTH + 1:
        raise ValueError(f"max_len must be greater than {HASH_SUFFIX_LENGTH + 1}, got {max_len}")

    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:HASH_SUFFIX_LENGTH]
    prefix_len = max_len - HASH_SUFFIX_LENGTH - 1
    return f"{name[:prefix_len]}-{digest}"


def formatted_identity(name: str, namespace: str) -> str:
    """
    Format a service identity as a label-safe value.

    Used as the value of the server label on pods, so it must fit
    MAX_K8S_LABEL_LENGTH: both parts are capped at 20 characters and a
    6 character hash of the full "name-namespace" keeps them unique.
    """
    digest = hashlib.md5(
        f"{name}-{namespace}".encode("utf-8"), usedforsecurity=False
    ).hexdigest()[:HASH_SUFFIX_LENGTH]
    return f"{name[:_IDENTITY_PART_LENGTH]}-{namespace[:_IDENTITY_PART_LENGTH]}-{digest}"
