"""Structured logging for ReleaseVault.

Helpers that attach operation context to log records, a JSON formatter that
serialises that context, and a rich-based console setup for applications
embedding the library.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from releasevault.shared.errors import ErrorContext, ReleaseVaultError


class StructuredFormatter(logging.Formatter):
    """Formatter that renders log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON.

        Args:
            record: Logging record

        Returns:
            JSON-encoded log line
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created,
                tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("error_code", "context", "operation", "duration_ms", "result_info"):
            if hasattr(record, attr):
                log_entry[attr] = getattr(record, attr)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _create_rich_console() -> Console:
    """Create a rich Console with the ReleaseVault theme."""
    custom_theme = Theme(
        {
            "logging.level.debug": "cyan",
            "logging.level.info": "green",
            "logging.level.warning": "yellow",
            "logging.level.error": "red bold",
            "logging.level.critical": "red bold reverse",
            "log.time": "dim cyan",
            "log.message": "white",
            "log.path": "dim blue",
        }
    )
    return Console(theme=custom_theme, stderr=True)


def setup_structured_logger(
    name: str = "releasevault",
    level: str = "INFO",
    log_file: str | None = None,
    *,
    use_rich_console: bool = True,
) -> logging.Logger:
    """Configure the library logger for an embedding application.

    Args:
        name: Logger name (default: "releasevault")
        level: Log level name (default: "INFO")
        log_file: Optional path of a JSON log file
        use_rich_console: Use rich console output instead of JSON lines

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        logger.handlers.clear()

    log_level = getattr(logging, level.upper())
    logger.setLevel(log_level)

    if use_rich_console:
        handler: logging.Handler = RichHandler(
            console=_create_rich_console(),
            show_time=True,
            show_level=True,
            show_path=True,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            log_time_format="[%H:%M:%S]",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
    handler.setLevel(log_level)
    logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def _context_to_dict(context: dict[str, Any] | ErrorContext | None) -> dict[str, Any]:
    if context is None:
        return {}
    if isinstance(context, ErrorContext):
        return context.safe_dict()
    return dict(context)


def log_operation_error(
    logger: logging.Logger,
    error: ReleaseVaultError,
    operation: str | None = None,
    additional_context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Log a ReleaseVaultError with its structured context.

    Args:
        logger: Logger instance
        error: The error to record
        operation: Operation name, defaults to the error context's operation
        additional_context: Extra context merged into the record
    """
    context_dict = error.context.safe_dict()
    context_dict.update(_context_to_dict(additional_context))

    logger.error(
        error.message,
        extra={
            "error_code": error.code.name,
            "context": context_dict,
            "operation": operation or error.context.operation,
        },
        exc_info=error.original_error is not None,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Log completion of an operation at DEBUG level."""
    logger.debug(
        "Operation '%s' completed successfully",
        operation,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": result_info or {},
            "context": _context_to_dict(context),
        },
    )


def log_operation_start(
    logger: logging.Logger,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Log the start of an operation at DEBUG level."""
    logger.debug(
        "Starting operation '%s'",
        operation,
        extra={
            "operation": operation,
            "context": context or {},
        },
    )


__all__ = [
    "StructuredFormatter",
    "log_operation_error",
    "log_operation_start",
    "log_operation_success",
    "setup_structured_logger",
]
