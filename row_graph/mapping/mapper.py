"""Result set to object graph mapper.

Single-pass O(n) reconstruction: each row is scanned into cells, folded
into the resolver tree, and the tree is assembled once the rows run out.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from row_graph.adapters.dbapi import (
    cells_from_row,
    columns_from_description,
    columns_from_names,
    iter_rows,
)
from row_graph.core.cache import SchemaCache, default_cache
from row_graph.core.config import MapperConfig, load_config
from row_graph.mapping.allocate import allocate_columns
from row_graph.mapping.assemble import assemble
from row_graph.mapping.introspect import build_schema
from row_graph.mapping.resolver import Resolver, load_row
from row_graph.mapping.schema import Cardinality, Column, Schema

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Mapper(Generic[T]):
    """Maps flat, joined result sets onto a destination type.

    Args:
        target: Destination type, e.g. ``list[User]``, ``User`` for a single
            result, or ``list[str]`` for a single column of primitives.
        config: MapperConfig, a dict of its options, or None for defaults.
        cache: Schema cache to use. Defaults to the process-wide cache.
    """

    def __init__(
        self,
        target: Any,
        config: MapperConfig | dict[str, Any] | None = None,
        cache: SchemaCache | None = None,
    ) -> None:
        self._target = target
        self._config = load_config(config)
        self._cache = cache if cache is not None else default_cache
        # Fail fast on destinations that can never be mapped; allocation
        # works on copies of this unallocated tree.
        self._template, self._cardinality = build_schema(target, self._config.delimiter)

    @property
    def target(self) -> Any:
        return self._target

    @property
    def config(self) -> MapperConfig:
        return self._config

    def _build(self, columns: Sequence[Column]) -> tuple[Schema, Cardinality]:
        schema = copy.deepcopy(self._template)
        pool = {column.name: column for column in columns}
        allocate_columns(schema, pool)
        if pool:
            logger.debug("Columns not mapped into %r: %s", self._target, list(pool))
        return schema, self._cardinality

    def schema_for(self, columns: Sequence[Column]) -> tuple[Schema, Cardinality]:
        """Return the allocated schema for a column list, cached when enabled."""
        if not self._config.use_cache:
            return self._build(columns)
        return self._cache.get_or_build(
            [column.name for column in columns],
            self._target,
            self._config.delimiter,
            lambda: self._build(columns),
        )

    def _map(self, columns: Sequence[Column], rows: Iterable[Any]) -> Any:
        schema, cardinality = self.schema_for(columns)
        resolver = Resolver()
        row_count = 0
        for row_index, row in enumerate(iter_rows(rows)):
            cells = cells_from_row(row, columns)
            load_row(
                schema,
                cells,
                resolver,
                row_index,
                null_child_policy=self._config.null_child_policy,
            )
            row_count += 1
        logger.debug(
            "Resolved %d row(s) into %d root element(s) for %r",
            row_count,
            len(resolver),
            self._target,
        )
        return assemble(schema, resolver, cardinality)

    def map(self, columns: Sequence[str | Column], rows: Iterable[Sequence[Any]]) -> Any:
        """Map positional rows described by ``columns``.

        Returns a list for sequence destinations and a single instance (or
        None when no rows resolve) for record destinations.
        """
        return self._map(columns_from_names(columns), rows)

    def map_many(self, rows: Iterable[Mapping[str, Any]]) -> Any:
        """Map dict rows; the first row's keys define the column order."""
        rows = list(rows)
        if not rows:
            return None if self._cardinality is Cardinality.ONE else []
        return self._map(columns_from_names(list(rows[0].keys())), rows)

    def map_cursor(self, cursor: Any) -> Any:
        """Map every remaining row of an executed DB-API cursor."""
        return self._map(columns_from_description(cursor.description), cursor)


def map_rows(
    target: Any,
    columns: Sequence[str | Column],
    rows: Iterable[Sequence[Any]],
    *,
    config: MapperConfig | dict[str, Any] | None = None,
) -> Any:
    """Map positional rows onto ``target``. See :class:`Mapper`."""
    return Mapper(target, config).map(columns, rows)


def map_cursor(
    target: Any,
    cursor: Any,
    *,
    config: MapperConfig | dict[str, Any] | None = None,
) -> Any:
    """Map an executed DB-API cursor onto ``target``. See :class:`Mapper`."""
    return Mapper(target, config).map_cursor(cursor)
