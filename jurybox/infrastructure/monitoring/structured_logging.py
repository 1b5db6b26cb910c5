"""Structured logging with OpenTelemetry trace correlation."""

import contextvars
import json
import logging
import sys
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from opentelemetry import trace

if TYPE_CHECKING:
    from ..config import LoggingConfig


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EventType(str, Enum):
    """Event types for structured logging."""

    SYSTEM = "system"
    ERROR = "error"
    EVALUATION = "evaluation"
    QUOTA = "quota"
    AUDIT = "audit"


@dataclass
class LogContext:
    """Log context information."""

    correlation_id: str
    evaluation_id: Optional[str] = None
    user_address: Optional[str] = None
    trace_id: Optional[str] = None
    span_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class StructuredLogRecord:
    """Structured log record."""

    timestamp: datetime
    level: LogLevel
    logger_name: str
    message: str
    event_type: EventType
    context: LogContext
    metadata: Dict[str, Any]
    error_details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        record = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "logger": self.logger_name,
            "message": self.message,
            "event_type": self.event_type.value,
            "context": self.context.to_dict(),
            "metadata": self.metadata,
        }

        if self.error_details:
            record["error"] = self.error_details

        return record

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, ensure_ascii=False)


_current_context: contextvars.ContextVar[Optional[LogContext]] = contextvars.ContextVar(
    "jurybox_log_context", default=None
)


class ContextManager:
    """Log context carried through ``contextvars``, so it follows asyncio tasks."""

    def set_context(self, context: LogContext) -> contextvars.Token:
        """Set context for the current execution context."""
        return _current_context.set(context)

    def get_context(self) -> Optional[LogContext]:
        """Get context for the current execution context."""
        return _current_context.get()

    def clear_context(self) -> None:
        """Clear context for the current execution context."""
        _current_context.set(None)

    @contextmanager
    def context_scope(self, context: LogContext) -> Iterator[LogContext]:
        """Context manager for temporary context."""
        token = self.set_context(context)
        try:
            yield context
        finally:
            _current_context.reset(token)


context_manager = ContextManager()


@contextmanager
def log_context(
    evaluation_id: Optional[str] = None,
    user_address: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> Iterator[LogContext]:
    """Attach evaluation identity to every record logged inside the block."""
    context = LogContext(
        correlation_id=correlation_id or str(uuid.uuid4()),
        evaluation_id=evaluation_id,
        user_address=user_address,
    )
    with context_manager.context_scope(context) as scoped:
        yield scoped


_RESERVED_ATTRIBUTES = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "funcName",
        "lineno",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "event_type",
    ]
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, manager: Optional[ContextManager] = None):
        super().__init__()
        self.context_manager = manager or context_manager

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        current = self.context_manager.get_context()
        # Copy so trace ids never leak into the shared context object
        context = replace(current) if current else LogContext(correlation_id=str(uuid.uuid4()))

        # Add trace information if available
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            context.trace_id = format(span_context.trace_id, "032x")
            context.span_id = format(span_context.span_id, "016x")

        event_type = getattr(record, "event_type", EventType.SYSTEM)
        if record.levelno >= logging.ERROR:
            event_type = EventType.ERROR

        metadata = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRIBUTES
        }
        metadata.update(
            {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            }
        )

        error_details = None
        if record.exc_info:
            error_details = {
                "exception_type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "exception_message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        structured_record = StructuredLogRecord(
            timestamp=datetime.fromtimestamp(record.created),
            level=LogLevel(record.levelname),
            logger_name=record.name,
            message=record.getMessage(),
            event_type=EventType(event_type),
            context=context,
            metadata=metadata,
            error_details=error_details,
        )

        return structured_record.to_json()


TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: "LoggingConfig") -> logging.Logger:
    """Configure the ``jurybox`` logger hierarchy.

    Returns the package logger. Calling it again replaces earlier handlers.
    """
    package_logger = logging.getLogger("jurybox")
    package_logger.setLevel(config.level.value)
    package_logger.propagate = config.propagate

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter: logging.Formatter = (
        JSONFormatter() if config.json_format else logging.Formatter(TEXT_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if config.log_file:
        file_handler = RotatingFileHandler(
            filename=config.log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return package_logger
