"""DB-API row source adapter.

Reads an already-executed DB-API 2.0 cursor (or any iterable of row
sequences) and converts each row into Cells. Handles both tuple-like rows
and dict-like rows from different drivers. Raw driver exceptions raised
while iterating are wrapped in RowSourceError.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from row_graph.core.exceptions import ConversionError, RowSourceError
from row_graph.mapping.schema import Column
from row_graph.value.cell import Cell


def columns_from_description(description: Sequence[Sequence[Any]] | None) -> list[Column]:
    """Build column descriptors from ``cursor.description``.

    The type code is used as a type hint only when the driver reports it as
    a type name string; numeric codes such as PostgreSQL OIDs are ignored.
    """
    if description is None:
        raise RowSourceError("Cursor has no result set (description is None)")
    columns = []
    for index, desc in enumerate(description):
        type_code = desc[1] if len(desc) > 1 else None
        columns.append(
            Column(
                name=str(desc[0]),
                index=index,
                type_name=type_code if isinstance(type_code, str) else "",
            )
        )
    return columns


def columns_from_names(columns: Sequence[str | Column]) -> list[Column]:
    """Normalize column names (or Column objects) into positional Columns."""
    result = []
    for index, col in enumerate(columns):
        if isinstance(col, Column):
            result.append(Column(name=col.name, index=index, type_name=col.type_name))
        else:
            result.append(Column(name=col, index=index))
    return result


def cells_from_row(row: Any, columns: Sequence[Column]) -> list[Cell]:
    """Scan one row into Cells, one per column."""
    if isinstance(row, Mapping):
        try:
            values = [row[column.name] for column in columns]
        except KeyError as e:
            raise RowSourceError(f"Row is missing column {e}") from None
    else:
        values = list(row)
        if len(values) != len(columns):
            raise RowSourceError(f"Row has {len(values)} values but {len(columns)} columns")

    cells = []
    for column, value in zip(columns, values, strict=True):
        try:
            cells.append(Cell.from_value(column.type_name, value))
        except ConversionError as e:
            raise ConversionError(e.detail, column=column.name) from e
    return cells


def iter_rows(rows: Iterable[Any]) -> Iterator[Any]:
    """Iterate a row source, wrapping driver failures in RowSourceError."""
    try:
        iterator = iter(rows)
    except TypeError as e:
        raise RowSourceError(f"Row source is not iterable: {e}") from e
    while True:
        try:
            row = next(iterator)
        except StopIteration:
            return
        except Exception as e:
            raise RowSourceError(f"Row source failed: {e}") from e
        yield row
