"""Context-aware logging and timing for ingestion and transformation runs."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional
from dataclasses import dataclass, field, replace
from enum import Enum

from .logging_config import ROOT_LOGGER_NAME, setup_logger


class LogLevel(Enum):
    """Log levels for structured logging."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class LogContext:
    """
    Correlation data attached to every message of one operation.

    ``correlation_id`` is the SQS message id for dispatches and a generated
    id for ingestion requests.
    """

    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_metadata(self, **kwargs) -> "LogContext":
        return replace(self, metadata={**self.metadata, **kwargs})


def render_message(message: str, context: Optional[LogContext] = None, **kwargs) -> str:
    """``[operation] [correlation_id] message (key=value, ...)``; absent parts are left out."""
    prefix = ""
    fields: Dict[str, Any] = dict(kwargs)
    if context:
        prefix = f"[{context.correlation_id}] "
        if context.operation:
            prefix = f"[{context.operation}] {prefix}"
        fields = {**context.metadata, **kwargs}

    rendered = f"{prefix}{message}"
    if fields:
        rendered += " (" + ", ".join(f"{k}={v}" for k, v in fields.items()) + ")"
    return rendered


class StructuredLogger:
    """Pipeline logger accepting a LogContext on every call."""

    def __init__(self, name: str, level: Optional[LogLevel] = None):
        self._logger = setup_logger(name, level.value if level else None)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: LogLevel, message: str, context: Optional[LogContext] = None, **kwargs):
        getattr(self._logger, level.value.lower())(render_message(message, context, **kwargs))

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.ERROR, message, context, **kwargs)

    def critical(self, message: str, context: Optional[LogContext] = None, **kwargs):
        self._log(LogLevel.CRITICAL, message, context, **kwargs)


def create_logger(component: str, level: Optional[LogLevel] = None) -> StructuredLogger:
    """Create a structured logger named under the pipeline root logger."""
    return StructuredLogger(f"{ROOT_LOGGER_NAME}.{component}", level)


@asynccontextmanager
async def timed_operation(
    logger: Any, operation_name: str, context: Optional[LogContext] = None
) -> AsyncIterator[None]:
    """
    Log how long the enclosed block took.

    Success is logged at DEBUG, failure at WARNING; the exception is
    re-raised either way.
    """
    start_time = time.perf_counter()
    try:
        yield
    except Exception:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.warning(f"{operation_name} failed after {duration_ms:.1f} ms", context)
        raise
    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.debug(f"{operation_name} finished in {duration_ms:.1f} ms", context)
