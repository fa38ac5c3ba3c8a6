"""Row aggregation.

Single-pass reconstruction using identity maps. Every schema level keeps a
Resolver mapping identity keys to elements in first-seen order; each element
owns one child Resolver per association, scoped to that element.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import Any, Literal

from row_graph.core.exceptions import ConversionError, NullConstraintError
from row_graph.mapping.schema import Column, FieldSpec, Schema, ValueKind
from row_graph.value.cell import Cell

NullChildPolicy = Literal["any", "all"]

IDENTITY_SEPARATOR = "\x1f"
ROW_KEY_PREFIX = "\x1erow:"

_GETTERS: dict[ValueKind, Callable[[Cell], Any]] = {
    ValueKind.BOOL: Cell.bool,
    ValueKind.INT: Cell.integer,
    ValueKind.FLOAT: Cell.float64,
    ValueKind.DECIMAL: Cell.decimal,
    ValueKind.TEXT: Cell.string,
    ValueKind.DATETIME: Cell.time,
    ValueKind.DATE: lambda cell: cell.time().date(),
    ValueKind.ANY: Cell.as_value,
}


class Element:
    """One resolved record (or primitive) and its child resolvers."""

    __slots__ = ("children", "values")

    def __init__(self, values: dict[int, Any]) -> None:
        self.values = values  # field position -> coerced value
        self.children: dict[int, Resolver] = {}

    def child(self, field_index: int) -> Resolver:
        """Return the resolver for an association, creating it on first use."""
        resolver = self.children.get(field_index)
        if resolver is None:
            resolver = Resolver()
            self.children[field_index] = resolver
        return resolver


class Resolver:
    """Identity map of elements for one schema level, in first-seen order."""

    __slots__ = ("elements", "order")

    def __init__(self) -> None:
        self.elements: dict[str, Element] = {}
        self.order: list[str] = []

    def get(self, key: str) -> Element | None:
        return self.elements.get(key)

    def add(self, key: str, element: Element) -> None:
        self.elements[key] = element
        self.order.append(key)

    def __len__(self) -> int:
        return len(self.order)

    def __iter__(self) -> Iterator[Element]:
        return (self.elements[key] for key in self.order)


def coerce_cell(cell: Cell, spec: FieldSpec, column: Column) -> Any:
    """Read ``cell`` as the type declared by ``spec``.

    Raises:
        NullConstraintError: the cell is null and the field is not optional.
        ConversionError: the stored value cannot be read as the declared type.
    """
    kind = spec.kind or ValueKind.ANY
    if not cell.is_valid:
        if spec.nullable or kind is ValueKind.ANY:
            return None
        raise NullConstraintError(column.name, spec.attribute or spec.name or "<element>")
    try:
        return _GETTERS[kind](cell)
    except ConversionError as e:
        raise ConversionError(
            e.detail, column=column.name, field=spec.attribute or "<element>"
        ) from e


def identity_key(schema: Schema, row: Sequence[Cell]) -> str:
    """Concatenate the uids of the cells this level owns, in column order."""
    return IDENTITY_SEPARATOR.join(row[i].uid() for i in schema.sorted_column_indexes)


def _skips_row(schema: Schema, row: Sequence[Cell], policy: NullChildPolicy) -> bool:
    owned = [row[i] for i in schema.sorted_column_indexes]
    if not owned:
        return False
    nulls = [not cell.is_valid for cell in owned]
    return all(nulls) if policy == "all" else any(nulls)


def _load_values(schema: Schema, row: Sequence[Cell]) -> dict[int, Any]:
    values: dict[int, Any] = {}
    for column in schema.owned_columns():
        index = column.field_index if column.field_index is not None else 0
        values[index] = coerce_cell(row[column.index], schema.fields[index], column)
    return values


def load_row(
    schema: Schema,
    row: Sequence[Cell],
    resolver: Resolver,
    row_index: int = 0,
    *,
    null_child_policy: NullChildPolicy = "any",
) -> None:
    """Fold one row into ``resolver`` and, recursively, its child resolvers.

    The root primitive sequence keeps every row, so its key is the row
    position. Every other level is keyed by the uids of the cells it owns,
    and nested levels skip rows whose owned cells are null. A nested level
    with no columns anywhere in its subtree never produces an element.
    """
    if not schema.is_root and (
        not schema.has_columns or _skips_row(schema, row, null_child_policy)
    ):
        return

    if schema.is_scalar and schema.is_root:
        key = f"{ROW_KEY_PREFIX}{row_index}"
    else:
        key = identity_key(schema, row)

    element = resolver.get(key)
    if element is None:
        element = Element(_load_values(schema, row))
        resolver.add(key, element)

    for field_index, child_schema in schema.children.items():
        load_row(
            child_schema,
            row,
            element.child(field_index),
            row_index,
            null_child_policy=null_child_policy,
        )
