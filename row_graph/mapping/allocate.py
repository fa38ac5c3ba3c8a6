"""Column allocation.

Walks a schema tree top-down and binds result columns to fields by name.
Columns are claimed from a shared pool so that no column feeds two levels.
"""

from __future__ import annotations

import logging

from row_graph.core.exceptions import AmbiguousOrMissingColumnError, ColumnCountError
from row_graph.mapping.naming import column_name_candidates
from row_graph.mapping.schema import Column, Schema

logger = logging.getLogger(__name__)


def allocate_columns(schema: Schema, columns: dict[str, Column]) -> None:
    """Bind columns from ``columns`` to ``schema`` and its descendants.

    Claimed columns are removed from ``columns``; whatever remains after the
    call was not matched by any level. Populates ``present_columns`` and
    ``sorted_column_indexes`` and ``has_columns`` on every schema node and
    sets the ancestor names of child schemas.

    Raises:
        ColumnCountError: a root primitive sequence does not see exactly one column.
        AmbiguousOrMissingColumnError: a nested primitive sequence does not
            find exactly one ancestor-qualified column.
    """
    present: dict[str, Column] = {}

    if schema.is_scalar:
        if schema.is_root:
            if len(columns) != 1:
                raise ColumnCountError(len(columns))
            name = next(iter(columns))
            present[name] = columns.pop(name).bind(0)
        else:
            candidates = column_name_candidates("", schema.ancestors, schema.delimiter)
            matched = [name for name in columns if name in candidates]
            if len(matched) != 1:
                raise AmbiguousOrMissingColumnError(list(schema.ancestors), matched)
            present[matched[0]] = columns.pop(matched[0]).bind(0)
    else:
        for i, spec in enumerate(schema.fields):
            # Associations claim their columns in their own pass below.
            if spec.is_association:
                continue
            candidates = column_name_candidates(spec.name, schema.ancestors, schema.delimiter)
            for name in [name for name in columns if name in candidates]:
                present[name] = columns.pop(name).bind(i)

    schema.present_columns = present
    schema.sorted_column_indexes = sorted(
        column.index for column in present.values() if column.field_index not in schema.children
    )
    logger.debug(
        "Allocated %d column(s) to %s at %r: %s",
        len(present),
        getattr(schema.target, "__name__", schema.target),
        schema.ancestors,
        sorted(present),
    )

    for i, child in schema.children.items():
        child.ancestors = [*schema.ancestors, schema.fields[i].name]
        allocate_columns(child, columns)

    schema.has_columns = bool(present) or any(
        child.has_columns for child in schema.children.values()
    )
