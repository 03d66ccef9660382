"""Create, update, and upsert decision procedure.

This module decides how one save request commits: a conditional upsert
onto an existing record, a create under a freshly resolved id, or an
update of the record named by the draft's own id.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from core.config import MemStoreConfig
from core.constants import ENTITY_TAG_FIELD, ID_FIELD
from core.errors import DuplicateIdError, MalformedRequestError
from core.logging_config import get_logger
from core.types import CollectionRef, EntityDraft, SaveOutcome, SaveRequest, SaveStatus
from store.collection_store import CollectionStore, StoreRecord
from store.id_resolver import IdResolver
from store.record_matcher import fields_equal, is_modifier_key
from store.result_pipeline import to_entity

_LOGGER = get_logger(__name__)


def is_new_draft(draft: EntityDraft | None) -> bool:
    """Return whether a draft has no id yet and must be created.

    A draft carrying a non-null ``id`` is never new, even when no record
    exists under that id; it saves through the update path.
    """
    if draft is None or draft.data is None:
        return False
    return draft.data.get(ID_FIELD) is None


class SaveOrchestrator:
    """Commit save requests into a collection store."""

    def __init__(
        self,
        store: CollectionStore,
        id_resolver: IdResolver,
        config: MemStoreConfig,
    ) -> None:
        self._store = store
        self._id_resolver = id_resolver
        self._config = config

    def save(self, request: SaveRequest) -> SaveOutcome:
        """Create, update, or upsert one record.

        Args:
            request: Save request with draft and upsert options.

        Returns:
            Tagged outcome with a copy of the committed record.

        Raises:
            MalformedRequestError: If the request has no draft or draft data.
            DuplicateIdError: If a create collides with an existing id.
            IdGenerationError: If no id could be generated.
        """
        draft = _require_draft(request)
        fields = public_fields(draft.data or {})
        if not is_new_draft(draft):
            return self._commit(draft, fields, str(fields[ID_FIELD]), creating=False)
        match_by = _upsert_match(fields, request.query.upsert_on)
        if match_by is not None:
            matched = self._upsert_existing(draft.ref, fields, match_by)
            if matched is not None:
                return self._outcome("upsert_matched", draft.ref, matched)
        record_id = self._id_resolver.resolve(draft)
        return self._commit(draft, fields, record_id, creating=True, match_by=match_by)

    def should_merge(self, draft: EntityDraft) -> bool:
        """Return whether a save overlays the previous record state.

        The draft's own merge flag wins; otherwise configuration decides.
        """
        if draft.merge is not None:
            return draft.merge
        return self._config.merge

    def _upsert_existing(
        self,
        ref: CollectionRef,
        fields: dict[str, Any],
        match_by: dict[str, Any],
    ) -> StoreRecord | None:
        """Update the first record equal to the draft on every ``match_by`` field."""
        update = {key: value for key, value in fields.items() if key != ID_FIELD}
        with self._store.transaction():
            for record in self._store.scan(ref.namespace_key, ref.collection):
                if fields_equal(record, match_by):
                    record.update(copy.deepcopy(update))
                    self._store.put(ref.namespace_key, ref.collection, record)
                    return record
        return None

    def _commit(
        self,
        draft: EntityDraft,
        fields: dict[str, Any],
        record_id: str,
        creating: bool,
        match_by: dict[str, Any] | None = None,
    ) -> SaveOutcome:
        ref = draft.ref
        record: StoreRecord = copy.deepcopy(fields)
        record[ID_FIELD] = record_id
        record[ENTITY_TAG_FIELD] = ref.canon
        with self._store.transaction():
            # A concurrent save may have stored a match while the id resolved.
            if match_by is not None:
                matched = self._upsert_existing(ref, fields, match_by)
                if matched is not None:
                    return self._outcome("upsert_matched", ref, matched)
            previous = self._store.get(ref.namespace_key, ref.collection, record_id)
            if creating and previous is not None:
                _LOGGER.warning("entity_id_exists", canon=ref.canon, id=record_id)
                raise DuplicateIdError(ref.canon, record_id)
            if previous is not None and self.should_merge(draft):
                record = {**previous, **record}
            self._store.put(ref.namespace_key, ref.collection, record)
        return self._outcome("created" if creating else "updated", ref, record)

    def _outcome(self, status: SaveStatus, ref: CollectionRef, record: StoreRecord) -> SaveOutcome:
        _LOGGER.debug("entity_saved", status=status, canon=ref.canon, id=record.get(ID_FIELD))
        return SaveOutcome(status=status, entity=to_entity(ref, record))


def public_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return draft fields without modifier keys such as the entity tag."""
    return {key: value for key, value in data.items() if not is_modifier_key(key)}


def _require_draft(request: SaveRequest | None) -> EntityDraft:
    if request is None or request.draft is None:
        raise MalformedRequestError(
            "Save request has no entity draft. Pass an EntityDraft to save."
        )
    if request.draft.data is None:
        raise MalformedRequestError(
            f"Entity draft for {request.draft.ref.canon} has no data. "
            "Provide a field mapping, even an empty one."
        )
    return request.draft


def _upsert_match(fields: dict[str, Any], upsert_on: tuple[str, ...]) -> dict[str, Any] | None:
    """Return the draft's values for every upsert field, or None to skip upsert."""
    if not upsert_on:
        return None
    candidates = {key: value for key, value in fields.items() if key != ID_FIELD}
    if not all(field_name in candidates for field_name in upsert_on):
        return None
    return {field_name: candidates[field_name] for field_name in upsert_on}
