"""Query selection and result shaping.

This module selects records for a query and then applies sort, skip,
limit, and field projection in that fixed order. Projection runs last
so projected-away fields can still take part in filtering and sorting.
"""

from __future__ import annotations

import operator
from functools import cmp_to_key
from typing import Any

from core.constants import ENTITY_TAG_FIELD, ID_FIELD
from core.types import CollectionRef, Entity, QuerySpec, SortDirective
from store.collection_store import CollectionStore, StoreRecord
from store.record_matcher import matches, safe_compare, values_equal


def run_query(store: CollectionStore, ref: CollectionRef, spec: QuerySpec) -> list[StoreRecord]:
    """Run a query against one collection.

    Args:
        store: Record map to read from.
        ref: Target collection.
        spec: Structured query.

    Returns:
        Record copies in result order.
    """
    results = _select(store, ref, spec)
    if spec.sort is not None:
        results = sort_records(results, spec.sort)
    if spec.skip is not None and spec.skip > 0:
        results = results[spec.skip :]
    if spec.limit is not None and spec.limit >= 0:
        results = results[: spec.limit]
    if spec.fields is not None:
        results = [project_fields(record, spec.fields) for record in results]
    return results


def sort_records(records: list[StoreRecord], directive: SortDirective) -> list[StoreRecord]:
    """Sort records by one field; ties keep their selection order."""
    direction = -1 if directive.descending else 1
    sort_field = directive.field

    def compare(left: StoreRecord, right: StoreRecord) -> int:
        return direction * _compare_values(left.get(sort_field), right.get(sort_field))

    return sorted(records, key=cmp_to_key(compare))


def project_fields(record: StoreRecord, fields: tuple[str, ...]) -> StoreRecord:
    """Keep ``id``, the entity tag, and whitelisted fields of a record."""
    kept = {ID_FIELD, ENTITY_TAG_FIELD, *fields}
    return {key: value for key, value in record.items() if key in kept}


def _select(store: CollectionStore, ref: CollectionRef, spec: QuerySpec) -> list[StoreRecord]:
    namespace, collection = ref.namespace_key, ref.collection
    if spec.single_id is not None:
        record = store.get(namespace, collection, spec.single_id)
        return [record] if record is not None else []
    if spec.ids is not None:
        selected = []
        for record_id in spec.ids:
            record = store.get(namespace, collection, record_id)
            if record is not None:
                selected.append(record)
        return selected
    return [record for record in store.scan(namespace, collection) if matches(record, spec.filter)]


def _compare_values(left: Any, right: Any) -> int:
    if safe_compare(operator.lt, left, right):
        return -1
    return 0 if values_equal(left, right) else 1


def to_entity(ref: CollectionRef, record: StoreRecord) -> Entity:
    """Wrap a record copy as an Entity without its entity tag."""
    data = {key: value for key, value in record.items() if key != ENTITY_TAG_FIELD}
    return Entity(ref=ref, data=data)
