"""Consolidated exception hierarchy for the isolation probe harness.

This module provides one exception hierarchy that:
1. Categorizes errors by concern (configuration, connection, query, outcome)
2. Carries a stable error code and structured details for logging
3. Keeps the engine's native error text untouched on query failures
"""

from __future__ import annotations

from typing import Any


class IsolationProbeError(Exception):
    """Base exception for all harness-specific errors."""

    default_message: str = "An unexpected error occurred"
    default_error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Configuration Errors
class ConfigurationError(IsolationProbeError):
    default_message = "Configuration error"
    default_error_code = "CONFIGURATION_ERROR"


class UnknownEngineError(ConfigurationError):
    default_error_code = "UNKNOWN_ENGINE"

    def __init__(self, engine: str, message: str | None = None, **kwargs: Any) -> None:
        if message is None:
            message = f"No session factory registered for engine '{engine}'"
        details = kwargs.pop("details", {}) or {}
        details["engine"] = engine
        super().__init__(message, details=details, **kwargs)


# Database Errors
class DatabaseError(IsolationProbeError):
    default_message = "Database operation failed"
    default_error_code = "DATABASE_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        engine: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.engine = engine
        details = kwargs.pop("details", {}) or {}
        if engine:
            details["engine"] = engine
        super().__init__(message, details=details, **kwargs)


class SessionConnectionError(DatabaseError):
    """Raised when a session to an engine cannot be opened.

    Wraps authentication, network and timeout failures from the driver. This
    error is always fatal for a run.
    """

    default_message = "Could not open database session"
    default_error_code = "CONNECTION_FAILED"

    def __init__(
        self,
        message: str | None = None,
        *,
        host: str | None = None,
        original_error: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        self.original_error = original_error
        details = kwargs.pop("details", {}) or {}
        if host:
            details["host"] = host
        if original_error is not None:
            details["original_error_type"] = type(original_error).__name__
        super().__init__(message, details=details, **kwargs)


class QueryError(DatabaseError):
    """Raised when the engine rejects a statement.

    ``native_message`` is the engine's own error text, byte for byte. The
    outcome classifier compares it verbatim, so it must never be rewritten.

    Attributes:
        native_message: Error message as reported by the engine
        code: SQLSTATE (PostgreSQL) or errno (MySQL), when the driver exposes one
        sql: The statement that failed
    """

    default_message = "Query failed"
    default_error_code = "QUERY_FAILED"

    def __init__(
        self,
        native_message: str,
        *,
        code: str | int | None = None,
        sql: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.native_message = native_message
        self.code = code
        self.sql = sql
        details = kwargs.pop("details", {}) or {}
        if code is not None:
            details["code"] = code
        if sql is not None:
            details["sql"] = sql
        super().__init__(native_message, details=details, **kwargs)


class SerializationConflictError(QueryError):
    """Raised when a statement fails with the engine's canonical conflict text.

    This is the only failure a scenario may expect and pass on.
    """

    default_error_code = "SERIALIZATION_CONFLICT"


# Outcome Errors
class OutcomeMismatchError(IsolationProbeError, AssertionError):
    """Raised when an observed outcome contradicts the expected classification."""

    default_message = "Observed outcome does not match expectation"
    default_error_code = "OUTCOME_MISMATCH"

    def __init__(
        self,
        expected: str,
        message: str | None = None,
        *,
        before: Any = None,
        after: Any = None,
        **kwargs: Any,
    ) -> None:
        if message is None:
            message = f"{expected} is expected"
        self.expected = expected
        self.before = before
        self.after = after
        details = kwargs.pop("details", {}) or {}
        details["expected"] = expected
        details["before"] = before
        details["after"] = after
        super().__init__(message, details=details, **kwargs)


def get_exception_error_code(exc: Exception) -> str:
    if isinstance(exc, IsolationProbeError):
        return exc.error_code
    return "INTERNAL_ERROR"
