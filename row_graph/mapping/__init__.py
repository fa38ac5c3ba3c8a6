"""Mapping layer - turn joined result sets into typed object graphs."""

from __future__ import annotations

from row_graph.mapping.allocate import allocate_columns
from row_graph.mapping.assemble import assemble
from row_graph.mapping.introspect import build_schema, column
from row_graph.mapping.mapper import Mapper, map_cursor, map_rows
from row_graph.mapping.naming import column_name_candidates, to_snake_case
from row_graph.mapping.resolver import Element, Resolver, load_row
from row_graph.mapping.schema import Cardinality, Column, FieldSpec, Schema, ValueKind

__all__ = [
    "Mapper",
    "map_rows",
    "map_cursor",
    "column",
    "build_schema",
    "allocate_columns",
    "load_row",
    "assemble",
    "Resolver",
    "Element",
    "Schema",
    "FieldSpec",
    "Column",
    "Cardinality",
    "ValueKind",
    "to_snake_case",
    "column_name_candidates",
]
