"""Structured logging and metric hooks.

Log lines are emitted as JSON objects carrying the current run context
(command name and run ID). Metrics are pushed to registered callbacks so the
embedding program can forward them to whatever collector it uses.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

# Context variables for run-scoped data
command_var: ContextVar[str | None] = ContextVar("command", default=None)
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)

_internal_logger = logging.getLogger("glue_store.observability")


class LogLevel(str, Enum):
    """Log levels matching Python's logging module."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogContext:
    """Context data to include with every log entry."""

    command: str | None = None
    run_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def current(cls) -> "LogContext":
        """Get current context from context variables."""
        return cls(command=command_var.get(), run_id=run_id_var.get())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        if self.command:
            result["command"] = self.command
        if self.run_id:
            result["run_id"] = self.run_id
        result.update(self.extra)
        return result


@dataclass
class LogEntry:
    """A structured log entry."""

    level: LogLevel
    message: str
    timestamp: str
    logger: str
    context: dict[str, Any] = field(default_factory=dict)
    error: dict[str, Any] | None = None
    duration_ms: float | None = None

    def to_json(self) -> str:
        """Serialize to JSON string."""
        data: dict[str, Any] = {
            "level": self.level.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "logger": self.logger,
        }
        if self.context:
            data["context"] = self.context
        if self.error:
            data["error"] = self.error
        if self.duration_ms is not None:
            data["duration_ms"] = self.duration_ms
        return json.dumps(data, default=str)


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        context = LogContext.current().to_dict()

        if hasattr(record, "context") and isinstance(record.context, dict):
            context.update(record.context)

        error = None
        if record.exc_info:
            error = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
                "message": str(record.exc_info[1]) if record.exc_info[1] else "",
            }

        entry = LogEntry(
            level=LogLevel(record.levelname),
            message=record.getMessage(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            logger=record.name,
            context=context,
            error=error,
            duration_ms=getattr(record, "duration_ms", None),
        )

        return entry.to_json()


class StructuredLogger:
    """Wrapper around Python logging with structured output.

    Example:
        logger = StructuredLogger("glue_store.caching")
        logger.debug("cache miss", context={"key": "discourse/1234"})
        logger.error("can't store item", context={"key": key}, error=exc)
    """

    def __init__(self, name: str, level: LogLevel | None = None) -> None:
        """Initialize structured logger.

        Args:
            name: Logger name (typically module name)
            level: Minimum log level. Inherited from the parent logger if unset.
        """
        self.logger = logging.getLogger(name)
        if level is not None:
            self.logger.setLevel(level.value)

    def _log(
        self,
        level: LogLevel,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
        duration_ms: float | None = None,
    ) -> None:
        extra: dict[str, Any] = {}
        if context:
            extra["context"] = context
        if duration_ms is not None:
            extra["duration_ms"] = duration_ms

        log_func = getattr(self.logger, level.value.lower())
        if error:
            log_func(message, exc_info=(type(error), error, error.__traceback__), extra=extra)
        else:
            log_func(message, extra=extra)

    def debug(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at DEBUG level."""
        self._log(LogLevel.DEBUG, message, context, error, duration_ms)

    def info(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at INFO level."""
        self._log(LogLevel.INFO, message, context, duration_ms=duration_ms)

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at WARNING level."""
        self._log(LogLevel.WARNING, message, context, error, duration_ms)

    def error(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at ERROR level."""
        self._log(LogLevel.ERROR, message, context, error, duration_ms)


class RunContext:
    """Context manager tagging every log line with the running command.

    Example:
        with RunContext(command="discourse-massage"):
            logger.info("starting up")
    """

    def __init__(self, command: str | None = None, run_id: str | None = None) -> None:
        self.command = command
        self.run_id = run_id or str(uuid.uuid4())
        self._tokens: list[tuple[ContextVar, Any]] = []

    def __enter__(self) -> "RunContext":
        self._tokens.append((run_id_var, run_id_var.set(self.run_id)))
        if self.command:
            self._tokens.append((command_var, command_var.set(self.command)))
        return self

    def __exit__(self, *args: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    async def __aenter__(self) -> "RunContext":
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)


class Timer:
    """Context manager for timing operations.

    Example:
        async with Timer() as t:
            await store.get(key)
        emit_timer("store_latency_ms", t.duration_ms, {"driver": "s3"})
    """

    def __init__(self) -> None:
        self.start_time: float = 0
        self.end_time: float = 0

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.perf_counter()

    async def __aenter__(self) -> "Timer":
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)


# Metric collection hook type
MetricCallback = Callable[[str, float, dict[str, Any]], None]

_metric_callbacks: list[MetricCallback] = []


def register_metric_callback(callback: MetricCallback) -> None:
    """Register a callback to receive metric events.

    Args:
        callback: Function(name, value, labels) to call on metrics
    """
    _metric_callbacks.append(callback)


def unregister_metric_callback(callback: MetricCallback) -> None:
    """Remove a previously registered callback. No-op if not registered."""
    if callback in _metric_callbacks:
        _metric_callbacks.remove(callback)


def emit_metric(name: str, value: float, labels: dict[str, Any] | None = None) -> None:
    """Emit a metric to all registered callbacks.

    A failing callback is logged and skipped so that metrics never break a
    store operation.

    Args:
        name: Metric name
        value: Metric value
        labels: Optional labels/dimensions
    """
    labels = dict(labels or {})

    command = command_var.get()
    if command:
        labels.setdefault("command", command)

    for callback in list(_metric_callbacks):
        try:
            callback(name, value, labels)
        except Exception as exc:
            _internal_logger.debug("metric callback failed for %s: %s", name, exc)


def emit_counter(name: str, labels: dict[str, Any] | None = None) -> None:
    """Emit a counter metric (increment by 1)."""
    emit_metric(name, 1.0, labels)


def emit_timer(name: str, duration_ms: float, labels: dict[str, Any] | None = None) -> None:
    """Emit a timer metric."""
    emit_metric(name, duration_ms, labels)


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format: str = "json",
) -> None:
    """Configure the package logger.

    Args:
        level: Minimum log level
        format: Output format ("json" or "text")
    """
    root_logger = logging.getLogger("glue_store")
    root_logger.setLevel(level.value)

    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)

    if format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger
    """
    return StructuredLogger(name)
