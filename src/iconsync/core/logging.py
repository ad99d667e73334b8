"""
Logging utilities for the icon sync pipeline.

Provides human-readable and JSON-structured formatters with run
correlation support, so every line of one synchronization run can be
traced by its run_id.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


CONTEXT_FIELDS = ("run_id", "correlation_id", "repository", "stage", "node_id")

_current_context: contextvars.ContextVar = contextvars.ContextVar("iconsync_correlation", default=None)


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON-structured log lines.

    Each log line includes:
    - Standard log fields (timestamp, level, message, logger)
    - Correlation fields if present (run_id, repository, stage, node_id)
    - Exception text if present
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_entry["timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable log lines with correlation context.

    Format: TIMESTAMP [LEVEL] LOGGER - MESSAGE [run_id=X stage=Y]
    """

    def __init__(self, include_timestamp: bool = True):
        if include_timestamp:
            fmt = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
        else:
            fmt = "[%(levelname)s] %(name)s - %(message)s"
        super().__init__(fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        context_parts = []
        for field in ("run_id", "stage"):
            value = getattr(record, field, None)
            if value is not None:
                context_parts.append(f"{field}={value}")

        if context_parts:
            return f"{base} [{' '.join(context_parts)}]"
        return base


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional logging level override

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    return logger


def configure_logging(
    level: int = logging.INFO,
    structured: bool = False,
    include_timestamp: bool = True,
    stream=None,
) -> None:
    """
    Configure the iconsync package logger.

    Args:
        level: Logging level (default: INFO)
        structured: If True, output JSON lines; otherwise human-readable
        include_timestamp: Whether to include timestamps
        stream: Output stream (default: stderr)
    """
    package_logger = logging.getLogger("iconsync")
    package_logger.setLevel(level)

    # Only add handler if none exist (avoid duplicate handlers)
    if not package_logger.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)

        if structured:
            formatter = StructuredFormatter(include_timestamp=include_timestamp)
        else:
            formatter = HumanReadableFormatter(include_timestamp=include_timestamp)

        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        package_logger.propagate = False


class CorrelationContext:
    """
    Context manager for adding correlation fields to log records.

    The active context is tracked per thread and per asyncio task, so a
    run on one thread never tags the log lines of another.

    Example:
        >>> with CorrelationContext(run_id="abc", repository="acme/icons"):
        ...     log_with_context(logger, logging.INFO, "Publishing")
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        repository: Optional[str] = None,
        **extra: Any,
    ):
        self.context = {
            "run_id": run_id,
            "correlation_id": correlation_id,
            "repository": repository,
            **extra,
        }
        self.context = {k: v for k, v in self.context.items() if v is not None}
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "CorrelationContext":
        self._token = _current_context.set(self)
        return self

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _current_context.reset(self._token)
            self._token = None

    @classmethod
    def get_current(cls) -> Dict[str, Any]:
        """Get the current correlation context."""
        current = _current_context.get()
        if current is None:
            return {}
        return current.context.copy()


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **extra: Any,
) -> None:
    """
    Log a message merged with the current CorrelationContext.

    Args:
        logger: The logger to use
        level: Log level (e.g., logging.INFO)
        message: Log message
        **extra: Additional fields to include
    """
    context = CorrelationContext.get_current()
    context.update(extra)
    logger.log(level, message, extra=context)
