"""Unit tests for the DB-API row source adapter."""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal

import pytest

from row_graph.adapters.dbapi import (
    cells_from_row,
    columns_from_description,
    columns_from_names,
    iter_rows,
)
from row_graph.core.exceptions import ConversionError, RowSourceError
from row_graph.mapping.schema import Column
from row_graph.value.cell import CellKind, ColumnHint


class TestColumns:
    def test_from_description(self) -> None:
        description = [
            ("id", "BIGINT", None, None, None, None, None),
            ("name", None, None, None, None, None, None),
            ("price", 1700, None, None, None, None, None),
        ]
        columns = columns_from_description(description)

        assert [(c.name, c.index, c.type_name) for c in columns] == [
            ("id", 0, "BIGINT"),
            ("name", 1, ""),
            ("price", 2, ""),
        ]

    def test_missing_description(self) -> None:
        with pytest.raises(RowSourceError, match="description"):
            columns_from_description(None)

    def test_from_names(self) -> None:
        columns = columns_from_names(["id", Column(name="total", index=9, type_name="FLOAT")])

        assert columns[0] == Column(name="id", index=0)
        assert columns[1] == Column(name="total", index=1, type_name="FLOAT")


class TestCellsFromRow:
    def test_positional_row(self) -> None:
        columns = columns_from_names(["id", "name", "amount"])
        cells = cells_from_row((1, None, Decimal("1.50")), columns)

        assert [c.kind for c in cells] == [CellKind.INT, CellKind.NULL, CellKind.TEXT]
        assert cells[2].decimal() == Decimal("1.50")

    def test_mapping_row(self) -> None:
        columns = columns_from_names(["id", "name"])
        cells = cells_from_row({"name": "Ann", "id": 4}, columns)

        assert cells[0].int64() == 4
        assert cells[1].string() == "Ann"

    def test_type_name_becomes_hint(self) -> None:
        columns = columns_from_description([("n", "SMALLINT", None, None, None, None, None)])
        (cell,) = cells_from_row((5,), columns)

        assert cell.hint is ColumnHint.INT32

    def test_mapping_row_missing_key(self) -> None:
        with pytest.raises(RowSourceError, match="name"):
            cells_from_row({"id": 1}, columns_from_names(["id", "name"]))

    def test_length_mismatch(self) -> None:
        with pytest.raises(RowSourceError):
            cells_from_row((1, 2, 3), columns_from_names(["id", "name"]))

    def test_unsupported_value_names_column(self) -> None:
        with pytest.raises(ConversionError) as exc_info:
            cells_from_row((object(),), columns_from_names(["blob"]))
        assert exc_info.value.column == "blob"


class TestIterRows:
    def test_passes_rows_through(self) -> None:
        assert list(iter_rows([(1,), (2,)])) == [(1,), (2,)]

    def test_not_iterable(self) -> None:
        with pytest.raises(RowSourceError, match="not iterable"):
            list(iter_rows(42))  # type: ignore[arg-type]

    def test_wraps_driver_failure(self) -> None:
        def failing() -> Iterator[tuple[int]]:
            yield (1,)
            raise OSError("connection reset")

        rows = iter_rows(failing())
        assert next(rows) == (1,)
        with pytest.raises(RowSourceError, match="connection reset") as exc_info:
            next(rows)
        assert isinstance(exc_info.value.__cause__, OSError)
