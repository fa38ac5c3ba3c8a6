"""Schema tree data classes.

A Schema describes how one destination type binds to result columns: its
field descriptors, the child schemas of its associations, and, once columns
have been allocated, which columns it owns. Schemas are mutated only while
columns are allocated and are read-only afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class ValueKind(Enum):
    """Declared type of a primitive field."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DECIMAL = "decimal"
    TEXT = "text"
    DATETIME = "datetime"
    DATE = "date"
    ANY = "any"


class Cardinality(Enum):
    """How many resolved elements a destination holds."""

    ONE = "one"
    MANY = "many"


@dataclass(frozen=True)
class Column:
    """A result column, optionally bound to a field of a schema."""

    name: str
    index: int
    type_name: str = ""
    field_index: int | None = None

    def bind(self, field_index: int) -> Column:
        """Return a copy of this column bound to the given field position."""
        return replace(self, field_index=field_index)


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor for a single destination field."""

    name: str  # column matching name
    attribute: str  # constructor keyword
    kind: ValueKind | None = None  # None for associations
    nullable: bool = False
    cardinality: Cardinality | None = None  # set for associations
    delimiter: str | None = None  # association delimiter override

    @property
    def is_association(self) -> bool:
        return self.cardinality is not None


@dataclass(eq=False)
class Schema:
    """Mapping tree node for one destination type.

    Scalar schemas describe sequences of primitives; they carry a single
    unnamed pseudo-field at position 0 describing the element type.
    """

    target: type
    fields: list[FieldSpec] = field(default_factory=list)
    children: dict[int, Schema] = field(default_factory=dict)
    delimiter: str = "_"
    ancestors: list[str] = field(default_factory=list)
    is_scalar: bool = False
    is_pydantic: bool = False
    present_columns: dict[str, Column] = field(default_factory=dict)
    sorted_column_indexes: list[int] = field(default_factory=list)
    has_columns: bool = False  # this level or a descendant owns a column

    @property
    def is_root(self) -> bool:
        return not self.ancestors

    def owned_columns(self) -> list[Column]:
        """Columns that feed this level's own fields, in column order."""
        by_index = {c.index: c for c in self.present_columns.values()}
        return [by_index[i] for i in self.sorted_column_indexes]

    def walk(self) -> list[Schema]:
        """Return this schema and all descendants, depth first."""
        nodes = [self]
        for child in self.children.values():
            nodes.extend(child.walk())
        return nodes
