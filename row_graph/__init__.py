"""RowGraph - rebuild nested object graphs from flat, joined result sets."""

from __future__ import annotations

from row_graph.core.cache import SchemaCache
from row_graph.core.config import MapperConfig
from row_graph.core.exceptions import (
    AmbiguousOrMissingColumnError,
    ColumnCountError,
    ColumnMismatchError,
    ConfigError,
    ConversionError,
    MappingError,
    NullConstraintError,
    RowGraphError,
    RowSourceError,
    SchemaError,
)
from row_graph.mapping import Mapper, column, map_cursor, map_rows
from row_graph.value import Cell

__all__ = [
    # Mapping
    "Mapper",
    "map_rows",
    "map_cursor",
    "column",
    # Config
    "MapperConfig",
    # Cache
    "SchemaCache",
    # Values
    "Cell",
    # Exceptions
    "RowGraphError",
    "MappingError",
    "SchemaError",
    "ColumnCountError",
    "AmbiguousOrMissingColumnError",
    "ConversionError",
    "NullConstraintError",
    "ColumnMismatchError",
    "RowSourceError",
    "ConfigError",
]
