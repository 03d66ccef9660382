"""Nested in-memory record map.

This module owns the ``namespace -> collection -> id -> record`` map.
Every read hands out deep copies and every write stores one, so callers
can never mutate committed state through a returned value.
"""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from core.constants import ID_FIELD

StoreRecord = dict[str, Any]
StoreMap = dict[str, dict[str, dict[str, StoreRecord]]]


class CollectionStore:
    """Lock-guarded record map with lazily created collections."""

    def __init__(self) -> None:
        self._entries: StoreMap = {}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["CollectionStore"]:
        """Hold the store lock for a read-modify-write sequence."""
        with self._lock:
            yield self

    def get(self, namespace: str, collection: str, record_id: str) -> StoreRecord | None:
        """Return a copy of one record, or None when absent."""
        with self._lock:
            record = self._entries.get(namespace, {}).get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def put(self, namespace: str, collection: str, record: Mapping[str, Any]) -> None:
        """Store a record under its own id, replacing any previous state.

        Raises:
            ValueError: If the record has no id.
        """
        record_id = record.get(ID_FIELD)
        if record_id is None:
            raise ValueError(
                f"Cannot store record in {namespace}/{collection} without an id. "
                "Resolve an id before committing."
            )
        with self._lock:
            records = self._entries.setdefault(namespace, {}).setdefault(collection, {})
            records[str(record_id)] = copy.deepcopy(dict(record))

    def delete(self, namespace: str, collection: str, record_id: str) -> bool:
        """Delete one record; missing records are a no-op.

        Returns:
            Whether a record was removed.
        """
        with self._lock:
            records = self._entries.get(namespace, {}).get(collection, {})
            return records.pop(record_id, None) is not None

    def scan(self, namespace: str, collection: str) -> list[StoreRecord]:
        """Return copies of all records in insertion order."""
        with self._lock:
            records = self._entries.get(namespace, {}).get(collection, {})
            return [copy.deepcopy(record) for record in records.values()]

    def snapshot(self) -> StoreMap:
        """Return a deep copy of the whole map."""
        with self._lock:
            return copy.deepcopy(self._entries)

    def replace_all(self, entries: StoreMap) -> None:
        """Replace the whole map with a copy of ``entries``."""
        with self._lock:
            self._entries = copy.deepcopy(entries)

    def merge_all(self, entries: StoreMap) -> None:
        """Deep-merge ``entries`` into the map; incoming values win."""
        with self._lock:
            self._entries = deep_merge(self._entries, copy.deepcopy(entries))


def deep_merge(base: dict[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively overlay ``incoming`` mappings onto ``base``.

    Args:
        base: Mapping updated in place.
        incoming: Values that win on key collisions.

    Returns:
        The updated ``base`` mapping.
    """
    for key, value in incoming.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            base[key] = value
    return base
