"""memstore exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure kind raises a specific error type for debuggability.
"""

from __future__ import annotations

from core.constants import DUPLICATE_ID_MESSAGE


class MemStoreError(Exception):
    """Base exception for all memstore failures."""


class MemStoreConfigError(MemStoreError):
    """Raised for invalid runtime configuration."""


class MemStoreDependencyError(MemStoreError):
    """Raised when an optional runtime dependency is missing."""


class MemStoreSnapshotError(MemStoreError):
    """Raised for unreadable or malformed store snapshots."""


class MalformedRequestError(MemStoreError):
    """Raised when a save request lacks an entity draft or its data."""


class IdGenerationError(MemStoreError):
    """Raised when the external id service cannot produce an id."""


class DuplicateIdError(MemStoreError):
    """Raised when a create finds an existing record under the resolved id."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(DUPLICATE_ID_MESSAGE.format(type=entity_type, id=entity_id))
        self.entity_type = entity_type
        self.entity_id = entity_id
