"""Unit tests for YAML store options loading."""

from __future__ import annotations

import pytest

from core.config import MemStoreConfig
from core.errors import MemStoreConfigError
from core.options_file import load_store_options
from tests.fixture_paths import fixture_path


def test_load_store_options_overlays_base_config() -> None:
    """Options file values should replace base config values."""
    config = load_store_options(str(fixture_path("store_options.yaml")), base=MemStoreConfig())

    assert (config.merge, config.id_length) == (False, 10)


def test_load_store_options_keeps_unset_values(tmp_path) -> None:
    """Fields absent from the file should keep base values."""
    options_path = tmp_path / "options.yaml"
    options_path.write_text("id_length: 8\n", encoding="utf-8")

    config = load_store_options(str(options_path), base=MemStoreConfig(merge=False))

    assert (config.merge, config.id_length) == (False, 8)


def test_load_store_options_rejects_unknown_fields() -> None:
    """Unknown option fields should fail validation."""
    with pytest.raises(MemStoreConfigError, match="web_dump"):
        load_store_options(str(fixture_path("invalid_options.yaml")), base=MemStoreConfig())


def test_load_store_options_rejects_missing_file(tmp_path) -> None:
    """A missing options file should raise a config error."""
    with pytest.raises(MemStoreConfigError):
        load_store_options(str(tmp_path / "missing.yaml"), base=MemStoreConfig())


def test_load_store_options_rejects_non_mapping_root(tmp_path) -> None:
    """The options root must be a mapping."""
    options_path = tmp_path / "options.yaml"
    options_path.write_text("- merge\n", encoding="utf-8")

    with pytest.raises(MemStoreConfigError):
        load_store_options(str(options_path), base=MemStoreConfig())


def test_load_store_options_rejects_non_boolean_merge(tmp_path) -> None:
    """Merge must be a YAML boolean."""
    options_path = tmp_path / "options.yaml"
    options_path.write_text("merge: sometimes\n", encoding="utf-8")

    with pytest.raises(MemStoreConfigError):
        load_store_options(str(options_path), base=MemStoreConfig())
