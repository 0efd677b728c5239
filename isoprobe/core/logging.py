"""Centralized logging configuration for the harness.

This module provides:
- Unified logger setup with console and optional rotating file handlers
- Structured JSON logging with contextual fields
- Scenario label context propagation via contextvars
- Helper functions for getting configured loggers
- Error message sanitization for secure logging
"""

from __future__ import annotations

import logging
import re
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pythonjsonlogger.json import JsonFormatter

if TYPE_CHECKING:
    from isoprobe.core.config import Settings

# Patterns for sensitive data sanitization
_PATH_PATTERN = re.compile(r"(/[^\s:]+)+")
_CREDENTIAL_PATTERNS = [
    re.compile(r"(password|passwd|secret|token)[=:]\s*\S+", re.IGNORECASE),
    re.compile(r"(postgres(?:ql)?|mysql)://[^@\s]+@", re.IGNORECASE),
]

# Context variable for scenario label propagation
_scenario_label: ContextVar[str | None] = ContextVar("scenario_label", default=None)

# Standard log format for console/file
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(scenario)s | %(message)s"


def get_scenario_label() -> str | None:
    """Get the label of the scenario currently running."""
    return _scenario_label.get()


def set_scenario_label(label: str | None) -> None:
    """Set the label of the scenario currently running."""
    _scenario_label.set(label)


class ContextFilter(logging.Filter):
    """Filter that adds contextual information to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add the scenario label to the log record."""
        record.scenario = get_scenario_label() or "-"  # type: ignore[attr-defined]
        return True


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with ISO timestamp and extra fields."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the JSON log record."""
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(UTC).isoformat()
        log_record["level"] = record.levelname
        log_record["component"] = record.name

        scenario = getattr(record, "scenario", None)
        if scenario and scenario != "-":
            log_record["scenario"] = scenario


def setup_logging(settings: Settings) -> None:
    """Configure process-wide logging.

    Sets up:
    - Console handler (StreamHandler) with plain text or JSON
    - File handler (RotatingFileHandler) when a log file path is configured
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers and filters
    root_logger.handlers.clear()
    root_logger.filters.clear()

    context_filter = ContextFilter()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.addFilter(context_filter)
    if settings.log_format == "json":
        console_handler.setFormatter(CustomJsonFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    # File handler (rotating)
    if settings.log_file_path:
        try:
            log_path = Path(settings.log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=settings.log_file_max_bytes,
                backupCount=settings.log_file_backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.addFilter(context_filter)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not set up file logging: {e}")

    # Reduce noise from database drivers
    logging.getLogger("asyncpg").setLevel(logging.WARNING)
    logging.getLogger("mysql.connector").setLevel(logging.WARNING)

    root_logger.debug(
        f"Logging configured: level={settings.log_level}, "
        f"format={settings.log_format}, file={settings.log_file_path}"
    )


def sanitize_error(error: Exception, max_length: int = 500) -> str:
    """Sanitize error message for secure logging.

    Removes potentially sensitive information from error messages:
    - Full file paths (keeps only filename)
    - Passwords and credentials embedded in DSNs
    - Truncates long error messages

    Args:
        error: The exception to sanitize
        max_length: Maximum length of the sanitized message (default 500)

    Returns:
        Sanitized error message safe for logging
    """
    msg = str(error)

    for pattern in _CREDENTIAL_PATTERNS:
        msg = pattern.sub("[REDACTED]", msg)

    def _simplify_path(match: re.Match[str]) -> str:
        path = match.group(0)
        parts = path.rsplit("/", 1)
        if len(parts) == 2:
            return f".../{parts[1]}"
        return path

    msg = _PATH_PATTERN.sub(_simplify_path, msg)

    if len(msg) > max_length:
        msg = msg[:max_length] + "...[truncated]"

    return msg


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
