"""Tests for structured logging."""

import json
import logging

from catalog.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    correlation_id_var,
    request_id_var,
)


def make_record(message: str = "hello %s", args: tuple = ("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord("catalog.test", logging.INFO, __file__, 10, message, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Test JSON log output."""

    def test_basic_fields(self) -> None:
        """Record is rendered as one JSON object."""
        data = json.loads(JsonFormatter().format(make_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "catalog.test"
        assert data["message"] == "hello world"
        assert "request_id" not in data

    def test_context_ids_are_included(self) -> None:
        """Correlation context is attached to every line."""
        with LogContext(request_id="req-1", correlation_id="corr-1"):
            data = json.loads(JsonFormatter().format(make_record()))
        assert data["request_id"] == "req-1"
        assert data["correlation_id"] == "corr-1"

    def test_extra_fields(self) -> None:
        """extra= values are copied, unserializable ones as strings."""
        data = json.loads(JsonFormatter().format(make_record(key="test:product:1", obj=object())))
        assert data["key"] == "test:product:1"
        assert isinstance(data["obj"], str)


class TestConsoleFormatter:
    """Test human-readable output."""

    def test_includes_request_id(self) -> None:
        """Short request id is appended."""
        with LogContext(request_id="abcdef123456"):
            line = ConsoleFormatter(use_colors=False).format(make_record())
        assert "hello world" in line
        assert "req=abcdef12" in line


class TestLogContext:
    """Test temporary context."""

    def test_restores_previous_values(self) -> None:
        """Context variables are reset on exit."""
        with LogContext(request_id="outer"):
            with LogContext(request_id="inner"):
                assert request_id_var.get() == "inner"
            assert request_id_var.get() == "outer"
        assert request_id_var.get() == ""
        assert correlation_id_var.get() == ""

    def test_ignores_unknown_names(self) -> None:
        """Unknown keys are ignored."""
        with LogContext(tenant="acme"):
            assert request_id_var.get() == ""


class TestConfigureLogging:
    """Test root logger setup."""

    def test_single_handler_with_formatter(self) -> None:
        """Reconfiguring replaces handlers instead of stacking them."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_logging(json_format=True, level="DEBUG")
            configure_logging(json_format=False, level="WARNING")
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, ConsoleFormatter)
            assert root.level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
