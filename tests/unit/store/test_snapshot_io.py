"""Unit tests for store snapshot serialization."""

from __future__ import annotations

import pytest

from core.errors import MemStoreSnapshotError
from store.snapshot_io import (
    export_snapshot,
    parse_snapshot,
    read_snapshot_file,
    write_snapshot_file,
)
from tests.fixture_paths import fixture_path


def test_export_is_compact_json() -> None:
    """Export should produce compact JSON in map order."""
    entries = {"-": {"foo": {"0": {"entity$": "-/-/foo", "q": 1, "id": "0"}}}}

    assert export_snapshot(entries) == '{"-":{"foo":{"0":{"entity$":"-/-/foo","q":1,"id":"0"}}}}'


def test_export_rejects_non_json_values() -> None:
    """Records holding non-JSON values cannot be exported."""
    with pytest.raises(MemStoreSnapshotError):
        export_snapshot({"-": {"foo": {"0": {"id": "0", "when": object()}}}})


def test_parse_fills_missing_record_ids() -> None:
    """Imported records without id should take their map key."""
    entries = parse_snapshot('{"foo": {"bar": {"aaa": {"a": 1}}}}')

    assert entries["foo"]["bar"]["aaa"] == {"a": 1, "id": "aaa"}


def test_parse_rejects_record_id_differing_from_key() -> None:
    """A record stored under another id's key should fail validation."""
    with pytest.raises(MemStoreSnapshotError, match="aaa"):
        parse_snapshot('{"foo": {"bar": {"aaa": {"id": "zzz", "a": 1}}}}')


def test_parse_rejects_invalid_json() -> None:
    """Invalid JSON should raise a snapshot error."""
    with pytest.raises(MemStoreSnapshotError):
        parse_snapshot("{not json")


def test_parse_rejects_wrong_nesting() -> None:
    """Collections must map ids to record objects."""
    with pytest.raises(MemStoreSnapshotError, match="foo/bar"):
        parse_snapshot('{"foo": {"bar": ["a"]}}')


def test_read_snapshot_fixture() -> None:
    """Fixture snapshot should load every record."""
    entries = read_snapshot_file(fixture_path("snapshot.json"))

    assert sorted(entries["-"]["zed"]) == ["a", "b", "c", "d"]


def test_read_missing_file_is_empty(tmp_path) -> None:
    """A missing snapshot file should read as an empty store."""
    assert read_snapshot_file(tmp_path / "missing.json") == {}


def test_write_then_read_snapshot_file(tmp_path) -> None:
    """Written snapshot files should read back unchanged."""
    entries = {"ns": {"foo": {"a": {"id": "a", "v": [1, 2]}}}}
    snapshot_path = tmp_path / "nested" / "snapshot.json"

    write_snapshot_file(snapshot_path, entries)

    assert read_snapshot_file(snapshot_path) == entries
