"""Store snapshot serialization helpers.

This module isolates JSON export, import validation, and snapshot file IO.
It keeps the store facade focused on request flow.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from core.constants import ID_FIELD
from core.errors import MemStoreSnapshotError
from store.collection_store import StoreMap


def export_snapshot(entries: StoreMap) -> str:
    """Serialize a store map into compact JSON.

    Args:
        entries: Store map snapshot.

    Returns:
        JSON text.

    Raises:
        MemStoreSnapshotError: If a record holds a non-JSON value.
    """
    return _dump_json(entries, indent=None)


def parse_snapshot(json_text: str) -> StoreMap:
    """Parse and validate snapshot JSON.

    Args:
        json_text: Exported snapshot text.

    Returns:
        Store map with every record carrying its id.

    Raises:
        MemStoreSnapshotError: If JSON is invalid or not a nested map.
    """
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as error:
        raise MemStoreSnapshotError(
            f"Failed to parse store snapshot: {error.msg}. "
            "Import text produced by export."
        ) from error
    return _validate_store_map(payload)


def read_snapshot_file(snapshot_path: Path) -> StoreMap:
    """Read a snapshot file; a missing file is an empty store.

    Args:
        snapshot_path: Snapshot JSON path.

    Returns:
        Parsed store map.

    Raises:
        MemStoreSnapshotError: If the file is unreadable or invalid.
    """
    if not snapshot_path.exists():
        return {}
    try:
        json_text = snapshot_path.read_text(encoding="utf-8")
    except OSError as error:
        raise MemStoreSnapshotError(
            f"Failed to read snapshot at {snapshot_path}: {error}. "
            "Check file permissions and retry."
        ) from error
    return parse_snapshot(json_text)


def write_snapshot_file(snapshot_path: Path, entries: StoreMap) -> None:
    """Write a store map to a snapshot file.

    Args:
        snapshot_path: Snapshot JSON path.
        entries: Store map snapshot.
    """
    snapshot_path.parent.mkdir(parents=True, exist_ok=True)
    snapshot_path.write_text(_dump_json(entries, indent=2) + "\n", encoding="utf-8")


def _validate_store_map(payload: Any) -> StoreMap:
    namespaces = _expect_object(payload, "snapshot root")
    entries: StoreMap = {}
    for namespace, collections in namespaces.items():
        collection_map = _expect_object(collections, f"namespace '{namespace}'")
        entries[namespace] = {}
        for collection, records in collection_map.items():
            context = f"collection '{namespace}/{collection}'"
            record_map = _expect_object(records, context)
            entries[namespace][collection] = {
                record_id: _with_id(
                    record_id, _expect_object(record, f"{context} record"), context
                )
                for record_id, record in record_map.items()
            }
    return entries


def _expect_object(value: Any, context: str) -> Mapping[str, Any]:
    if isinstance(value, dict):
        return value
    raise MemStoreSnapshotError(
        f"Invalid {context} in store snapshot: expected JSON object, "
        f"got {type(value).__name__}. Import text produced by export."
    )


def _with_id(record_id: str, record: Mapping[str, Any], context: str) -> dict[str, Any]:
    restored = dict(record)
    stored_id = restored.get(ID_FIELD)
    if stored_id is None:
        restored[ID_FIELD] = record_id
    elif str(stored_id) != record_id:
        raise MemStoreSnapshotError(
            f"Invalid {context} record '{record_id}' in store snapshot: "
            f"id field is '{stored_id}'. Store each record under its own id."
        )
    return restored


def _dump_json(entries: StoreMap, indent: int | None) -> str:
    separators = (",", ":") if indent is None else None
    try:
        return json.dumps(entries, indent=indent, separators=separators)
    except (TypeError, ValueError) as error:
        raise MemStoreSnapshotError(
            f"Failed to export store snapshot: {error}. "
            "Store only JSON-compatible values to make the store exportable."
        ) from error
