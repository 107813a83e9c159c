"""Tests for structured logging."""

import json
import logging
import sys

from scrob.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


def _record(msg: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="scrob.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        assert set_correlation_id("test-123-abc") == "test-123-abc"
        assert get_correlation_id() == "test-123-abc"

    def test_set_correlation_id_generates_uuid_when_missing(self):
        """None and empty string both generate a fresh UUID."""
        first = set_correlation_id(None)
        second = set_correlation_id("")
        assert len(first) == 36
        assert len(second) == 36
        assert first != second

    def test_filter_injects_correlation_id(self):
        """The filter attaches the current ID to every record."""
        set_correlation_id("corr-1")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "corr-1"


class TestFormatters:
    """Test the JSON and compact formatters."""

    def test_json_formatter_emits_fields(self):
        """JSON lines carry level, logger and correlation id."""
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = _record("scrobbled")
        record.correlation_id = "corr-2"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "scrobbled"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "scrob.test"
        assert payload["correlation_id"] == "corr-2"

    def test_compact_formatter_shows_exception_chain_root_first(self):
        """Chained exceptions are listed root cause first."""
        try:
            try:
                raise KeyError("inner")
            except KeyError as inner:
                raise RuntimeError("outer") from inner
        except RuntimeError:
            text = CompactExceptionFormatter("%(message)s").format(
                _record("failed", exc_info=sys.exc_info())
            )

        assert "╰─► KeyError" in text
        assert "╰─► RuntimeError: outer" in text
        assert text.index("KeyError") < text.index("RuntimeError")


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_sets_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_replaces_handlers(self):
        """Repeated calls don't stack handlers."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")

        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(log_level="CHATTY", json_format=False)
        assert logging.getLogger().level == logging.INFO
