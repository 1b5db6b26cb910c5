"""Unit tests for structured logging."""

import asyncio
import json
import logging
import sys

import pytest

from jurybox.infrastructure.config import LoggingConfig
from jurybox.infrastructure.monitoring.structured_logging import (
    ContextManager,
    EventType,
    JSONFormatter,
    LogContext,
    LogLevel,
    context_manager,
    log_context,
    setup_logging,
)


def make_record(message="hello", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="jurybox.test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    """Test cases for log context propagation."""

    def test_scope_restores_previous_context(self):
        manager = ContextManager()
        outer = LogContext(correlation_id="outer")
        inner = LogContext(correlation_id="inner")

        manager.set_context(outer)
        try:
            with manager.context_scope(inner):
                assert manager.get_context() is inner
            assert manager.get_context() is outer
        finally:
            manager.clear_context()

        assert manager.get_context() is None

    def test_log_context_sets_identity(self):
        with log_context(evaluation_id="eval-1", user_address="0.0.1001") as context:
            current = context_manager.get_context()

        assert current is context
        assert current.evaluation_id == "eval-1"
        assert current.correlation_id
        assert context_manager.get_context() is None

    @pytest.mark.asyncio
    async def test_context_follows_tasks(self):
        async def read_context():
            return context_manager.get_context()

        with log_context(evaluation_id="eval-2") as context:
            seen = await asyncio.create_task(read_context())

        assert seen is context

    def test_to_dict_omits_unset_fields(self):
        context = LogContext(correlation_id="abc", evaluation_id="eval-1")

        assert context.to_dict() == {"correlation_id": "abc", "evaluation_id": "eval-1"}


class TestJSONFormatter:
    """Test cases for JSONFormatter."""

    def test_formats_record_with_context(self):
        formatter = JSONFormatter()

        with log_context(evaluation_id="eval-3", user_address="0.0.1001", correlation_id="c-1"):
            payload = json.loads(formatter.format(make_record("round done", round_number=2)))

        assert payload["message"] == "round done"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "jurybox.test"
        assert payload["event_type"] == EventType.SYSTEM.value
        assert payload["context"] == {
            "correlation_id": "c-1",
            "evaluation_id": "eval-3",
            "user_address": "0.0.1001",
        }
        assert payload["metadata"]["round_number"] == 2
        assert "error" not in payload

    def test_explicit_event_type(self):
        formatter = JSONFormatter()

        payload = json.loads(formatter.format(make_record(event_type=EventType.QUOTA)))

        assert payload["event_type"] == "quota"
        assert payload["context"]["correlation_id"]

    def test_errors_carry_exception_details(self):
        formatter = JSONFormatter()
        try:
            raise RuntimeError("ledger unavailable")
        except RuntimeError:
            record = make_record("settlement failed", level=logging.ERROR)
            record.exc_info = sys.exc_info()

        payload = json.loads(formatter.format(record))

        assert payload["event_type"] == "error"
        assert payload["error"]["exception_type"] == "RuntimeError"
        assert payload["error"]["exception_message"] == "ledger unavailable"


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_configures_package_logger(self, tmp_path):
        log_file = tmp_path / "jurybox.log"
        config = LoggingConfig(level=LogLevel.DEBUG, json_format=True, log_file=str(log_file))

        package_logger = setup_logging(config)
        try:
            assert package_logger.name == "jurybox"
            assert package_logger.level == logging.DEBUG
            assert len(package_logger.handlers) == 2
            assert all(isinstance(h.formatter, JSONFormatter) for h in package_logger.handlers)

            logging.getLogger("jurybox.application").info("evaluation started")
            for handler in package_logger.handlers:
                handler.flush()

            line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
            assert json.loads(line)["message"] == "evaluation started"
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
                handler.close()

    def test_repeated_setup_replaces_handlers(self):
        package_logger = setup_logging(LoggingConfig())
        try:
            setup_logging(LoggingConfig())
            assert len(package_logger.handlers) == 1
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
                handler.close()
