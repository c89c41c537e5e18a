"""Structured logging with JSON output and correlation ID support."""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, ClassVar, TextIO

# One correlation ID per workflow run
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# ContextVar has no default_factory; get_log_context handles the missing case
log_context_var: ContextVar[dict[str, Any]] = ContextVar("log_context")

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Optional correlation ID. Generated if not provided.

    Returns:
        The correlation ID that was set.
    """
    cid = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(cid)
    return cid


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    try:
        return log_context_var.get().copy()
    except LookupError:
        return {}


def set_log_context(**kwargs: Any) -> None:
    """Add key-value pairs to the logging context."""
    ctx = get_log_context()
    ctx.update(kwargs)
    log_context_var.set(ctx)


def clear_log_context() -> None:
    """Clear the logging context."""
    log_context_var.set({})


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS
    }


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, *, include_path: bool = False) -> None:
        """Initialize the JSON formatter.

        Args:
            include_path: Include file path and line number.
        """
        super().__init__()
        self.include_path = include_path

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a single JSON line."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if self.include_path:
            log_data["path"] = f"{record.pathname}:{record.lineno}"

        cid = get_correlation_id()
        if cid:
            log_data["correlation_id"] = cid

        log_data["message"] = record.getMessage()

        context = get_log_context()
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter with color support."""

    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, *, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as text, appending extras as key=value."""
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        level = f"{record.levelname:8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        parts = [timestamp, level, f"[{record.name}]"]

        cid = get_correlation_id()
        if cid:
            parts.append(f"[{cid[:8]}]")

        parts.append(record.getMessage())
        parts.extend(f"{k}={v}" for k, v in _extra_fields(record).items())

        message = " ".join(parts)
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    logger_name: str | None = "blob_quickstart",
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return a logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format_type: Output format ('json' or 'text').
        logger_name: Logger to configure. Defaults to the package logger.
        stream: Output stream. Defaults to stderr so logs stay out of the
            console narration on stdout.

    Returns:
        Configured logger instance.
    """
    output = stream or sys.stderr
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    handler = logging.StreamHandler(output)
    handler.setLevel(getattr(logging, level.upper()))
    if format_type == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(TextFormatter(use_color=output.isatty()))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name (usually __name__)."""
    return logging.getLogger(name)
