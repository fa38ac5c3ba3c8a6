"""RowGraph exception hierarchy.

All exceptions are RowGraph-specific. Raw driver exceptions are never
exposed to callers; they are chained onto a RowSourceError instead.
"""

from __future__ import annotations


class RowGraphError(Exception):
    """Base exception for all RowGraph errors."""


# --- Mapping ---


class MappingError(RowGraphError):
    """Base for mapping errors."""


class SchemaError(MappingError):
    """Raised when a destination type cannot be turned into a schema."""


class ColumnCountError(MappingError):
    """Raised when a scalar destination does not see exactly one column."""

    def __init__(self, column_count: int) -> None:
        self.column_count = column_count
        super().__init__(
            "When mapping to a sequence of a primitive type the result set must "
            f"have exactly one column (got {column_count})"
        )


class AmbiguousOrMissingColumnError(MappingError):
    """Raised when a nested primitive sequence cannot find exactly one column."""

    def __init__(self, ancestors: list[str], matches: list[str]) -> None:
        self.ancestors = ancestors
        self.matches = matches
        super().__init__(
            f"Primitive sequence at '{'.'.join(ancestors)}' expected exactly one "
            f"matching column, got {len(matches)}: {matches}"
        )


class ConversionError(MappingError):
    """Raised when a scanned value cannot be coerced to the requested type."""

    def __init__(
        self,
        detail: str,
        *,
        column: str | None = None,
        field: str | None = None,
    ) -> None:
        self.detail = detail
        self.column = column
        self.field = field
        if column is not None and field is not None:
            message = f"Cannot convert column '{column}' into field '{field}': {detail}"
        elif column is not None:
            message = f"Cannot convert column '{column}': {detail}"
        else:
            message = detail
        super().__init__(message)


class NullConstraintError(MappingError):
    """Raised when a null value is scanned into a field that cannot hold it."""

    def __init__(self, column: str | None, field: str) -> None:
        self.column = column
        self.field = field
        if column is None:
            message = f"Field '{field}' is not optional but no value was resolved"
        else:
            message = f"Column '{column}' is null but field '{field}' is not optional"
        super().__init__(message)


class ColumnMismatchError(MappingError):
    """Raised when a destination cannot be constructed from the bound columns."""

    def __init__(self, target_class: str, missing_fields: list[str]) -> None:
        self.target_class = target_class
        self.missing_fields = missing_fields
        super().__init__(f"Cannot map to {target_class}: {missing_fields}")


# --- Row source ---


class RowSourceError(RowGraphError):
    """Raised when the row source fails or yields malformed rows."""


# --- Configuration ---


class ConfigError(RowGraphError):
    """Raised when a MapperConfig is invalid."""
