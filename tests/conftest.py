"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_STORE_ENV_VARS = ("MEMSTORE_MERGE", "MEMSTORE_ID_LENGTH")


def pytest_sessionstart() -> None:
    """Put the repository root and src directory on sys.path."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root, project_root / "src"):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _isolated_store_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host MEMSTORE_* settings out of config built from env."""
    for env_var in _STORE_ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)
