"""Tests for logging helpers and error types."""

import logging

import pytest
import structlog
from cloudintents.config.settings import Settings
from cloudintents.core.errors import (
    ClusterReadError,
    CloudIntentsError,
    ForbiddenError,
    NotFoundError,
    PodNotFoundError,
    ValidationError,
    format_error_message,
)
from cloudintents.logging import (
    bind_context,
    configure_logging,
    configure_logging_from_settings,
    redact_credentials,
)
from structlog.testing import capture_logs


@pytest.fixture
def restore_structlog():
    previous = structlog.get_config()
    package_logger = logging.getLogger("cloudintents")
    previous_level = package_logger.level
    yield
    structlog.configure(**previous)
    package_logger.setLevel(previous_level)


class TestBindContext:
    """Tests for bind_context()."""

    def test_fields_bound(self):
        with capture_logs() as logs:
            bind_context(namespace="prod", pod="checkout-abc").info("service_identity_resolved")

        assert logs[0]["event"] == "service_identity_resolved"
        assert logs[0]["namespace"] == "prod"
        assert logs[0]["pod"] == "checkout-abc"

    def test_none_fields_dropped(self):
        with capture_logs() as logs:
            bind_context(namespace="prod", pod=None).info("event")

        assert "pod" not in logs[0]


class TestRedactCredentials:
    """Tests for the credential masking processor."""

    def test_long_values_keep_suffix(self):
        event = redact_credentials(None, "info", {"access_key_id": "ASIAEXAMPLEKEY1234", "region": "us-east-1"})

        assert event["access_key_id"] == "...1234"
        assert event["region"] == "us-east-1"

    def test_short_values_fully_masked(self):
        event = redact_credentials(None, "info", {"token": "abc"})
        assert event["token"] == "[REDACTED]"

    def test_none_left_alone(self):
        assert redact_credentials(None, "info", {"session_token": None}) == {"session_token": None}


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_pipeline(self, restore_structlog):
        configure_logging(logging.WARNING)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert redact_credentials in processors
        assert logging.getLogger("cloudintents").level == logging.WARNING

    def test_console_pipeline(self, restore_structlog):
        configure_logging("debug", json_output=False)

        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
        assert logging.getLogger("cloudintents").level == logging.DEBUG

    def test_from_settings(self, restore_structlog):
        configure_logging_from_settings(Settings(log_level="ERROR", log_json=False))

        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
        assert logging.getLogger("cloudintents").level == logging.ERROR


class TestErrors:
    """Tests for the error hierarchy."""

    def test_hierarchy(self):
        assert issubclass(ForbiddenError, ClusterReadError)
        assert issubclass(NotFoundError, ClusterReadError)
        assert issubclass(PodNotFoundError, NotFoundError)
        assert issubclass(ClusterReadError, CloudIntentsError)
        assert issubclass(ValidationError, CloudIntentsError)

    def test_details_default_empty(self):
        error = ValidationError("bad input")
        assert error.details == {}
        assert str(error) == "bad input"

    def test_format_without_details(self):
        assert format_error_message(ValidationError("bad input")) == "bad input"

    def test_format_with_details(self):
        error = ForbiddenError("Forbidden reading Deployment", {"name": "checkout", "status": 403})
        assert format_error_message(error) == "Forbidden reading Deployment (name=checkout, status=403)"
