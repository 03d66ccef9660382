"""Shared typed models.

This module defines the immutable data models used by the query engine,
the save orchestrator, and the store facade to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from core.constants import ID_FIELD, MISSING_CANON_PART


@dataclass(frozen=True)
class CollectionRef:
    """Identity of one typed collection.

    Attributes:
        collection: Collection (entity kind) name.
        namespace: Optional namespace grouping collections.
        zone: Optional zone, only forwarded to the id service.
    """

    collection: str
    namespace: str | None = None
    zone: str | None = None

    @property
    def namespace_key(self) -> str:
        """Return the store map key for this namespace."""
        return self.namespace if self.namespace else MISSING_CANON_PART

    @property
    def canon(self) -> str:
        """Return canonical ``zone/namespace/collection`` string."""
        zone = self.zone if self.zone else MISSING_CANON_PART
        return f"{zone}/{self.namespace_key}/{self.collection}"

    @classmethod
    def parse(cls, canon: str) -> "CollectionRef":
        """Parse ``collection``, ``namespace/collection`` or full canon strings.

        Args:
            canon: Slash separated collection reference.

        Returns:
            Parsed collection reference.

        Raises:
            ValueError: If the string has no collection part.
        """
        parts = [part.strip() for part in canon.strip().split("/")]
        if not parts[-1] or parts[-1] == MISSING_CANON_PART or len(parts) > 3:
            raise ValueError(
                f"Invalid collection reference '{canon}': "
                "expected collection, namespace/collection or zone/namespace/collection."
            )
        parts = [None if part in ("", MISSING_CANON_PART) else part for part in parts]
        padded = [None] * (3 - len(parts)) + parts
        return cls(collection=str(padded[2]), namespace=padded[1], zone=padded[0])


@dataclass(frozen=True)
class SortDirective:
    """Single-field sort order.

    Attributes:
        field: Record field to sort by.
        descending: Sort direction, ascending when False.
    """

    field: str
    descending: bool = False


@dataclass(frozen=True)
class QuerySpec:
    """Structured query for load, list, remove and save calls.

    Exactly one selection applies: ``single_id``, then ``ids``, then
    ``filter`` (an empty filter selects every record).

    Attributes:
        filter: Field predicates evaluated by the record matcher.
        single_id: Select the one record with this id.
        ids: Select records with these ids, in the given order.
        sort: Optional single-field sort directive.
        skip: Number of leading results to drop when positive.
        limit: Maximum number of results when non-negative.
        fields: Projection whitelist; ``id`` is always kept.
        load_removed: Return the removed record from a single remove.
        remove_all: Remove every selected record instead of the first.
        upsert_on: Fields that identify an existing record on save.
    """

    filter: Mapping[str, Any] = field(default_factory=dict)
    single_id: str | None = None
    ids: tuple[str, ...] | None = None
    sort: SortDirective | None = None
    skip: int | None = None
    limit: int | None = None
    fields: tuple[str, ...] | None = None
    load_removed: bool = False
    remove_all: bool = False
    upsert_on: tuple[str, ...] | None = None

    @classmethod
    def by_id(cls, record_id: str) -> "QuerySpec":
        """Build a query selecting one record by id."""
        return cls(single_id=record_id)

    @classmethod
    def by_ids(cls, record_ids: tuple[str, ...] | list[str]) -> "QuerySpec":
        """Build a query selecting records by an ordered id list."""
        return cls(ids=tuple(record_ids))


@dataclass(frozen=True)
class EntityDraft:
    """Caller-supplied record pending save.

    Attributes:
        ref: Target collection.
        data: Field values; a missing or None ``id`` marks the draft as new.
        explicit_id: Id to use when creating a new record.
        merge: Per-save merge override; None defers to configuration.
    """

    ref: CollectionRef
    data: Mapping[str, Any] | None
    explicit_id: str | None = None
    merge: bool | None = None


@dataclass(frozen=True)
class Entity:
    """Committed record snapshot returned to callers.

    Attributes:
        ref: Collection the record belongs to.
        data: Record fields including ``id``.
    """

    ref: CollectionRef
    data: Mapping[str, Any]

    @property
    def id(self) -> str | None:
        """Return the record id."""
        value = self.data.get(ID_FIELD)
        return None if value is None else str(value)

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dictionary copy of the record fields."""
        return dict(self.data)


SaveStatus = Literal["created", "updated", "upsert_matched"]


@dataclass(frozen=True)
class SaveRequest:
    """One save call.

    Attributes:
        draft: Entity draft to persist.
        query: Save options; only ``upsert_on`` is consulted.
    """

    draft: EntityDraft | None
    query: QuerySpec = field(default_factory=QuerySpec)


@dataclass(frozen=True)
class SaveOutcome:
    """Tagged save result.

    Attributes:
        status: Which branch committed the record.
        entity: Copy of the committed or matched record.
    """

    status: SaveStatus
    entity: Entity
