"""Custom exceptions for pgfluent.

Errors carry a human-readable message plus a machine-readable context dict,
so a failing statement can explain itself both in a terminal and as JSON.
"""

from __future__ import annotations

from typing import Any


class PgFluentError(Exception):
    """Base exception for all pgfluent errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class UnsupportedInputKindError(PgFluentError):
    """An operation expecting a record received something else."""

    def __init__(self, operation: str, received: Any, expected: str = "record") -> None:
        received_name = received.__name__ if isinstance(received, type) else type(received).__name__
        if expected == "record":
            expectation = "a dataclass or pydantic model instance"
        else:
            expectation = "a dataclass or pydantic model (type or instance)"
        message = (
            f"{operation}() only supports record types; got {received_name}. "
            f"Pass {expectation}."
        )
        super().__init__(
            message,
            {"operation": operation, "received": received_name, "expected": expected},
        )
        self.operation = operation
        self.received = received_name


class RowShapeError(PgFluentError):
    """A result row does not line up with a record's resolved columns."""

    def __init__(self, record_type: type, expected: list[str], detail: str) -> None:
        message = (
            f"Row does not match columns of '{record_type.__qualname__}': {detail}. "
            f"Expected columns: {', '.join(expected) or '(none)'}"
        )
        super().__init__(
            message,
            {"record_type": record_type.__qualname__, "expected_columns": expected},
        )
        self.expected_columns = expected


class ConfigurationError(PgFluentError):
    """An environment or option value is not recognized."""

    def __init__(self, setting: str, value: str, valid: list[str]) -> None:
        message = f"Invalid value '{value}' for {setting}. Valid values: {', '.join(valid)}"
        super().__init__(message, {"setting": setting, "value": value, "valid": valid})
        self.setting = setting
        self.value = value
