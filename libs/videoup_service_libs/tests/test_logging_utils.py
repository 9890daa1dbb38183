"""Tests for logging_utils module processors and configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest
import structlog
from structlog.contextvars import get_contextvars
from videoup_service_libs.logging_utils import (
    add_service_context,
    add_trace_context,
    bind_request_context,
    configure_service_logging,
    create_service_logger,
)


class TestAddServiceContext:
    """Tests for the add_service_context processor."""

    def test_adds_service_name_and_environment_from_env(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SERVICE_NAME", "video-service")
        monkeypatch.setenv("ENVIRONMENT", "production")
        event_dict: dict[str, Any] = {"event": "test message", "correlation_id": "abc-123"}

        result = add_service_context(None, "", event_dict)

        assert result["service.name"] == "video-service"
        assert result["deployment.environment"] == "production"
        assert result["correlation_id"] == "abc-123"

    def test_defaults_when_env_missing(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SERVICE_NAME", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        result = add_service_context(None, "", {})

        assert result["service.name"] == "unknown"
        assert result["deployment.environment"] == "development"


class TestAddTraceContext:
    """Tests for the add_trace_context processor."""

    def test_adds_formatted_ids_for_valid_span(self) -> None:
        span_context = Mock(is_valid=True, trace_id=0x1234, span_id=0xABCD)
        span = Mock()
        span.get_span_context.return_value = span_context

        with patch(
            "videoup_service_libs.logging_utils.get_current_span", return_value=span
        ):
            result = add_trace_context(None, "", {})

        assert result["trace_id"] == format(0x1234, "032x")
        assert result["span_id"] == format(0xABCD, "016x")
        assert len(result["trace_id"]) == 32
        assert len(result["span_id"]) == 16

    def test_leaves_event_untouched_without_span(self) -> None:
        # The default non-recording span has an invalid context
        result = add_trace_context(None, "", {"event": "x"})

        assert result == {"event": "x"}


class TestConfigureServiceLogging:
    """Tests for configure_service_logging."""

    def test_file_logging_adds_rotating_handler(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        log_file = tmp_path / "logs" / "video-service.log"
        monkeypatch.setenv("LOG_MAX_BYTES", "2048")
        monkeypatch.setenv("LOG_BACKUP_COUNT", "3")

        configure_service_logging(
            "video-service",
            environment="testing",
            log_level="DEBUG",
            log_to_file=True,
            log_file_path=str(log_file),
        )

        root = logging.getLogger()
        rotating = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 2048
        assert rotating[0].backupCount == 3
        assert log_file.parent.is_dir()
        assert root.level == logging.DEBUG

        for handler in rotating:
            handler.close()

    def test_without_file_logging_only_stream_handler(self) -> None:
        configure_service_logging("video-service", environment="testing", log_to_file=False)

        root = logging.getLogger()
        assert not any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)


class TestRequestContext:
    """Tests for logger creation and request context binding."""

    def test_create_service_logger_binds_name(self) -> None:
        logger = create_service_logger("video.api")

        assert logger is not None
        assert hasattr(logger, "info")

    def test_bind_request_context_replaces_previous_values(self) -> None:
        bind_request_context("first", path="/video/1")
        bind_request_context("second")

        context = get_contextvars()
        assert context == {"correlation_id": "second"}

        structlog.contextvars.clear_contextvars()
