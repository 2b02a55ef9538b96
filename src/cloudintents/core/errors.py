"""
Unified error types for cloudintents.

Every failure raised by the identity resolver, the GCP policy synthesizer
and the AWS credential exchanger derives from CloudIntentsError and carries
a human readable message plus structured details for the caller to log.

Only one failure is recovered locally: a Forbidden read of a Pod owner,
which the resolver answers with a best-effort identity. Everything else
propagates to the caller.
"""

from __future__ import annotations

from typing import Any


class CloudIntentsError(Exception):
    """Base exception for cloudintents errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(CloudIntentsError):
    """Raised when an input is malformed. Never retried."""


class ConfigurationError(CloudIntentsError):
    """Raised for configuration-related errors."""


class ClusterReadError(CloudIntentsError):
    """Raised when a Kubernetes read fails for a reason other than 403/404."""


class NotFoundError(ClusterReadError):
    """Raised when a Kubernetes object does not exist."""


class ForbiddenError(ClusterReadError):
    """Raised when the caller lacks RBAC permission to read an object."""


class PodNotFoundError(NotFoundError):
    """Raised when no pod matches a ClientIntents label selector."""


class ExternalServiceError(CloudIntentsError):
    """Raised when an external cloud API call fails."""


def format_error_message(error: CloudIntentsError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
