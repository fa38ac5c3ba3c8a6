"""Value layer - scanned column values and their coercions."""

from __future__ import annotations

from row_graph.value.cell import Cell, CellKind, ColumnHint, hint_for_type_name

__all__ = [
    "Cell",
    "CellKind",
    "ColumnHint",
    "hint_for_type_name",
]
