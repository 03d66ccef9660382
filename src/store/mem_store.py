"""Process-local document store facade.

This module exposes save, load, list, and remove over typed collections,
plus whole-store dump, export, and import for development fixtures.
"""

from __future__ import annotations

from core.config import MemStoreConfig
from core.constants import ID_FIELD, STORE_NAME
from core.logging_config import get_logger
from core.types import CollectionRef, Entity, EntityDraft, SaveOutcome, SaveRequest
from store.collection_store import CollectionStore, StoreMap
from store.id_resolver import IdResolver, IdService
from store.query_parsing import QueryInput, parse_query
from store.result_pipeline import run_query, to_entity
from store.save_orchestrator import SaveOrchestrator
from store.snapshot_io import export_snapshot, parse_snapshot

_LOGGER = get_logger(__name__)

CollectionInput = CollectionRef | str


class MemStore:
    """In-memory document store for development and tests."""

    def __init__(
        self,
        config: MemStoreConfig | None = None,
        id_service: IdService | None = None,
    ) -> None:
        """Create an empty store.

        Args:
            config: Optional runtime configuration.
            id_service: Optional external id service for new records.
        """
        self._config = config or MemStoreConfig.from_env()
        self._records = CollectionStore()
        self._orchestrator = SaveOrchestrator(
            self._records,
            IdResolver(self._config, id_service),
            self._config,
        )

    @property
    def config(self) -> MemStoreConfig:
        """Return the runtime configuration."""
        return self._config

    def save(self, draft: EntityDraft | None, query: QueryInput = None) -> Entity:
        """Create or update a record.

        Args:
            draft: Entity draft to persist.
            query: Optional save options, e.g. ``{"upsert$": ["email"]}``.

        Returns:
            Copy of the committed record.

        Raises:
            MalformedRequestError: If the draft or its data is missing.
            DuplicateIdError: If a create collides with an existing id.
            IdGenerationError: If the id service fails.
        """
        return self.save_with_outcome(draft, query).entity

    def save_with_outcome(self, draft: EntityDraft | None, query: QueryInput = None) -> SaveOutcome:
        """Save a record and report which branch committed it."""
        request = SaveRequest(draft=draft, query=parse_query(query))
        return self._orchestrator.save(request)

    def load(self, ref: CollectionInput, query: QueryInput) -> Entity | None:
        """Return the first record selected by a query, or None.

        Args:
            ref: Target collection or canon string.
            query: Id, id list, filter mapping, or QuerySpec.

        Returns:
            First matching record copy when found.
        """
        collection_ref = _as_ref(ref)
        results = run_query(self._records, collection_ref, parse_query(query))
        entity = to_entity(collection_ref, results[0]) if results else None
        _LOGGER.debug(
            "entity_loaded",
            canon=collection_ref.canon,
            id=entity.id if entity else None,
        )
        return entity

    def list(self, ref: CollectionInput, query: QueryInput = None) -> list[Entity]:
        """Return every record selected by a query.

        Args:
            ref: Target collection or canon string.
            query: Id, id list, filter mapping, or QuerySpec.

        Returns:
            Record copies in result order.
        """
        collection_ref = _as_ref(ref)
        results = run_query(self._records, collection_ref, parse_query(query))
        _LOGGER.debug("entities_listed", canon=collection_ref.canon, count=len(results))
        return [to_entity(collection_ref, record) for record in results]

    def remove(self, ref: CollectionInput, query: QueryInput) -> Entity | None:
        """Delete the first selected record, or all of them with ``all$``.

        Args:
            ref: Target collection or canon string.
            query: Id, id list, filter mapping, or QuerySpec.

        Returns:
            The removed record when ``load$`` is set on a single remove.
        """
        collection_ref = _as_ref(ref)
        spec = parse_query(query)
        with self._records.transaction():
            results = run_query(self._records, collection_ref, spec)
            targets = results if spec.remove_all else results[:1]
            for record in targets:
                self._records.delete(
                    collection_ref.namespace_key,
                    collection_ref.collection,
                    str(record[ID_FIELD]),
                )
                _LOGGER.debug(
                    "entity_removed",
                    mode="all" if spec.remove_all else "one",
                    canon=collection_ref.canon,
                    id=record[ID_FIELD],
                )
        if spec.load_removed and not spec.remove_all and targets:
            return to_entity(collection_ref, targets[0])
        return None

    def close(self) -> None:
        """Release the store; records stay available until the process exits."""
        _LOGGER.debug("store_closed", store=STORE_NAME)

    def dump(self) -> StoreMap:
        """Return a deep copy of the whole record map."""
        return self._records.snapshot()

    def export(self) -> str:
        """Serialize the whole record map to JSON."""
        return export_snapshot(self._records.snapshot())

    def import_snapshot(self, json_text: str, merge: bool = False) -> None:
        """Load exported JSON into the store.

        Args:
            json_text: Text produced by ``export``.
            merge: Deep-merge into current records instead of replacing them.

        Raises:
            MemStoreSnapshotError: If the text is not a valid snapshot.
        """
        self.import_entries(parse_snapshot(json_text), merge=merge)

    def import_entries(self, entries: StoreMap, merge: bool = False) -> None:
        """Load an already parsed record map into the store.

        Args:
            entries: Store map, e.g. from a snapshot file.
            merge: Deep-merge into current records instead of replacing them.
        """
        if merge:
            self._records.merge_all(entries)
        else:
            self._records.replace_all(entries)
        _LOGGER.info("store_imported", merge=merge, namespaces=len(entries))


def _as_ref(ref: CollectionInput) -> CollectionRef:
    return CollectionRef.parse(ref) if isinstance(ref, str) else ref
