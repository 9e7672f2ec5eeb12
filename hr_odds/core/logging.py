"""
Structured logging with JSON output and per-run context.

Every log line carries the request correlation ID and, while an ingestion
job is running, the job name. Both live in context variables so scheduler
runs and HTTP-triggered runs log the same way.
"""
import logging
import json
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator
from contextvars import ContextVar

from hr_odds.core.tracing import get_trace_id

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
job_name_var: ContextVar[str] = ContextVar("job_name", default="")

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "message", "asctime", "taskName",
})


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter.

    Fields: timestamp (UTC ISO 8601), level, logger, message,
    correlation_id, job, trace_id (inside a recorded span), exception (if
    any), extra (anything passed via
    ``extra=``).
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
        }

        job = job_name_var.get()
        if job:
            log_data["job"] = job

        trace_id = get_trace_id()
        if trace_id:
            log_data["trace_id"] = trace_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable colored console output for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.COLORS.get(record.levelname, "")
        prefix = f"{level_color}[{record.levelname}]{self.RESET} {record.name}"

        job = job_name_var.get()
        if job:
            prefix += f" [{job}]"

        base_msg = f"{prefix}: {record.getMessage()}"

        correlation_id = get_correlation_id()
        if correlation_id:
            base_msg += f" | correlation_id={correlation_id}"

        if record.exc_info:
            base_msg += "\n" + self.formatException(record.exc_info)

        return base_msg


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    handler: logging.Handler | None = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name
        json_output: JSON formatter if True, colored console formatter otherwise
        handler: Optional custom handler (defaults to a stdout StreamHandler)
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)

    handler.setFormatter(JSONFormatter() if json_output else ColoredFormatter())
    root_logger.addHandler(handler)

    # Reduce noise from third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> Any:
    """Set the correlation ID; returns a token for ``clear_correlation_id``."""
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    """Current correlation ID or empty string."""
    return correlation_id_var.get()


def clear_correlation_id(token: Any) -> None:
    """Reset the correlation ID using the token from ``set_correlation_id``."""
    correlation_id_var.reset(token)


@contextmanager
def job_logging_context(job_name: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with ``job_name``."""
    token = job_name_var.set(job_name)
    try:
        yield
    finally:
        job_name_var.reset(token)
