"""Public SDK surface for memstore.

This module provides a stable import path for store users.
It re-exports the store facade, typed models, and error types.
"""

from __future__ import annotations

from core.config import MemStoreConfig
from core.errors import (
    DuplicateIdError,
    IdGenerationError,
    MalformedRequestError,
    MemStoreError,
)
from core.types import (
    CollectionRef,
    Entity,
    EntityDraft,
    QuerySpec,
    SaveOutcome,
    SortDirective,
)
from store.id_resolver import IdService, RandomIdService
from store.mem_store import MemStore
from store.query_parsing import parse_query
from store.record_matcher import matches

__all__ = [
    "CollectionRef",
    "DuplicateIdError",
    "Entity",
    "EntityDraft",
    "IdGenerationError",
    "IdService",
    "MalformedRequestError",
    "MemStore",
    "MemStoreConfig",
    "MemStoreError",
    "QuerySpec",
    "RandomIdService",
    "SaveOutcome",
    "SortDirective",
    "matches",
    "parse_query",
]
