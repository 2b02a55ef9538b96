"""
Structured logging for cloudintents.

Library code logs through structlog with event-style names. Applications
embedding the package call configure_logging() (or
configure_logging_from_settings()) once at startup; until then structlog's
defaults apply.

Temporary AWS credentials pass through the exchanger, so every configured
pipeline masks credential fields before rendering.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from cloudintents.config.settings import Settings

LOGGER_NAME = "cloudintents"

# Event keys whose values are credentials
SENSITIVE_KEYS = frozenset(
    {
        "access_key_id",
        "secret_access_key",
        "session_token",
        "access_key",
        "secret_key",
        "token",
        "private_key",
    }
)

_VISIBLE_SUFFIX = 4


def _mask(value: Any) -> str:
    text = str(value)
    if len(text) <= _VISIBLE_SUFFIX * 2:
        return "[REDACTED]"
    return f"...{text[-_VISIBLE_SUFFIX:]}"


def redact_credentials(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog processor masking credential values, keeping the last 4 chars."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key] is not None:
            event_dict[key] = _mask(event_dict[key])
    return event_dict


def configure_logging(level: int | str = logging.INFO, json_output: bool = True) -> None:
    """
    Configure the structlog/standard logging bridge.

    Args:
        level: Standard logging level, as a number or name ("DEBUG")
        json_output: Render JSON lines; otherwise the human readable console format
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_credentials,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")
    logging.getLogger(LOGGER_NAME).setLevel(level)


def configure_logging_from_settings(settings: Settings) -> None:
    configure_logging(settings.log_level, json_output=settings.log_json)


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """
    Logger bound to the given fields, e.g. namespace and pod for one resolution.

    Fields whose value is None are left out.
    """
    context = {key: value for key, value in kwargs.items() if value is not None}
    return structlog.get_logger(LOGGER_NAME).bind(**context)
