"""RowRunner exception hierarchy.

All exceptions are RowRunner-specific. Raw driver exceptions are chained
as ``__cause__`` and never raised to callers directly.
"""

from __future__ import annotations

from typing import Any


class RowRunnerError(Exception):
    """Base exception for all RowRunner errors."""


# --- Adapter ---


class AdapterError(RowRunnerError):
    """Base for adapter errors."""


class AcquisitionError(AdapterError):
    """Raised when no connection can be obtained."""


# --- Execution ---


class ExecutionError(RowRunnerError):
    """Raised when a statement cannot be executed or its resources released."""

    def __init__(self, detail: str, sql: str | None = None) -> None:
        self.sql = sql
        self.detail = detail
        if sql is None:
            super().__init__(detail)
        else:
            super().__init__(f"{detail} Query: {sql}")


class BindError(ExecutionError):
    """Raised on parameter arity or binding failures."""

    def __init__(
        self,
        detail: str,
        sql: str | None = None,
        expected: int | None = None,
        given: int | None = None,
    ) -> None:
        self.expected = expected
        self.given = given
        super().__init__(detail, sql)

    @classmethod
    def arity(cls, sql: str, expected: int, given: int) -> BindError:
        """Build the error for a wrong number of supplied parameters."""
        return cls(
            f"Wrong number of parameters: expected {expected}, was given {given}.",
            sql,
            expected=expected,
            given=given,
        )


# --- Mapping ---


class MappingError(RowRunnerError):
    """Base for mapping errors."""


class ConversionError(MappingError):
    """Raised when a value cannot be coerced into a field's declared type."""

    def __init__(self, field: str, target_type: Any, value: Any) -> None:
        self.field = field
        self.target_type = target_type
        self.value = value
        type_name = getattr(target_type, "__name__", repr(target_type))
        super().__init__(f"Cannot convert {value!r} to {type_name} for field '{field}'")
