"""Schema cache - builds each allocated schema tree at most once.

Key convention:
    (("id", "name", "posts_title"), list[User], "_") -> allocated Schema

A schema is allocated against one exact, ordered column list, so the column
names are part of the key alongside the destination type and delimiter.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from row_graph.mapping.schema import Cardinality, Schema

logger = logging.getLogger(__name__)

CacheKey = tuple[tuple[str, ...], Any, str]
CacheEntry = tuple["Schema", "Cardinality"]


class SchemaCache:
    """Thread-safe store of allocated schema trees.

    Entries are read-only once stored: the same Schema object is handed to
    every caller that maps the same columns into the same destination.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()
        self._build_locks: dict[CacheKey, threading.Lock] = {}

    @staticmethod
    def key(columns: Sequence[str], target: Any, delimiter: str) -> CacheKey:
        return (tuple(columns), target, delimiter)

    def lookup(self, columns: Sequence[str], target: Any, delimiter: str) -> CacheEntry | None:
        """Return the cached entry for the key, or None."""
        with self._lock:
            return self._entries.get(self.key(columns, target, delimiter))

    def store(
        self,
        columns: Sequence[str],
        target: Any,
        delimiter: str,
        entry: CacheEntry,
    ) -> CacheEntry:
        """Store an entry unless one exists; return the entry that is kept."""
        with self._lock:
            return self._entries.setdefault(self.key(columns, target, delimiter), entry)

    def get_or_build(
        self,
        columns: Sequence[str],
        target: Any,
        delimiter: str,
        build: Callable[[], CacheEntry],
    ) -> CacheEntry:
        """Return the cached entry, building it on a miss.

        Each key has its own build lock, so a key is built at most once while
        builds for other keys proceed in parallel. ``build`` must not request
        the key it is building.
        """
        key = self.key(columns, target, delimiter)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                logger.debug("Schema cache hit for %r", target)
                return entry
            build_lock = self._build_locks.setdefault(key, threading.Lock())

        with build_lock:
            with self._lock:
                entry = self._entries.get(key)
            if entry is not None:
                logger.debug("Schema cache hit for %r after waiting", target)
                return entry
            logger.debug("Schema cache miss for %r with columns %s", target, list(columns))
            entry = build()
            with self._lock:
                self._entries[key] = entry
                self._build_locks.pop(key, None)
            return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        """Number of cached schemas."""
        with self._lock:
            return len(self._entries)


default_cache = SchemaCache()
