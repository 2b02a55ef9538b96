"""Core modules for cloudintents - centralized definitions and utilities."""

from cloudintents.core.errors import (
    CloudIntentsError,
    ClusterReadError,
    ConfigurationError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    PodNotFoundError,
    ValidationError,
    format_error_message,
)

__all__ = [
    "CloudIntentsError",
    "ClusterReadError",
    "ConfigurationError",
    "ExternalServiceError",
    "ForbiddenError",
    "NotFoundError",
    "PodNotFoundError",
    "ValidationError",
    "format_error_message",
]
