"""Integration tests for end-to-end store behavior."""

from __future__ import annotations

import threading
import time

from core.config import MemStoreConfig
from core.types import CollectionRef, EntityDraft, QuerySpec, SortDirective
from store.mem_store import MemStore

_ITEMS = CollectionRef("item", namespace="shop")
_USERS = CollectionRef("user", namespace="auth")


def _populated_store() -> MemStore:
    store = MemStore(MemStoreConfig())
    for price in (50, 10, 40, 20, 30):
        store.save(EntityDraft(ref=_ITEMS, data={"price": price, "kind": "tool"}))
    store.save(EntityDraft(ref=_ITEMS, data={"price": 5, "kind": "toy"}))
    store.save(EntityDraft(ref=_USERS, data={"email": "a@x.io"}, explicit_id="u1"))
    return store


def test_sorted_page_with_projection() -> None:
    """Filter, sort, skip, limit and projection should compose."""
    store = _populated_store()
    spec = QuerySpec(
        filter={"kind": "tool"},
        sort=SortDirective(field="price"),
        skip=1,
        limit=2,
        fields=("kind",),
    )

    page = store.list(_ITEMS, spec)

    assert [sorted(entity.data) for entity in page] == [["id", "kind"], ["id", "kind"]]
    assert [store.load(_ITEMS, entity.id).data["price"] for entity in page] == [20, 30]


def test_export_import_roundtrip_preserves_lists() -> None:
    """Importing an export should restore every collection's list results."""
    store = _populated_store()
    before = {ref: store.list(ref) for ref in (_ITEMS, _USERS)}

    restored = MemStore(MemStoreConfig())
    restored.import_snapshot(store.export())

    assert {ref: restored.list(ref) for ref in (_ITEMS, _USERS)} == before


def test_concurrent_creates_with_same_id_conflict_once() -> None:
    """Only one of many concurrent creates under one id should succeed."""
    store = MemStore(MemStoreConfig())
    outcomes: list[str] = []
    lock = threading.Lock()

    def create() -> None:
        try:
            store.save(EntityDraft(ref=_USERS, data={"email": "c@x.io"}, explicit_id="shared"))
            result = "created"
        except Exception as error:
            result = type(error).__name__
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=create) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["DuplicateIdError"] * 7 + ["created"]


def test_concurrent_merges_keep_every_field() -> None:
    """Concurrent merge updates to one record should not lose fields."""
    store = MemStore(MemStoreConfig())
    store.save(EntityDraft(ref=_USERS, data={"email": "m@x.io"}, explicit_id="m1"))

    def update(index: int) -> None:
        store.save(EntityDraft(ref=_USERS, data={"id": "m1", f"f{index}": index}))

    threads = [threading.Thread(target=update, args=(index,)) for index in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    loaded = store.load(_USERS, "m1")
    assert loaded is not None and all(f"f{index}" in loaded.data for index in range(16))


class _SlowIdService:
    def __init__(self, delay_seconds: float) -> None:
        self._delay_seconds = delay_seconds
        self._lock = threading.Lock()
        self._issued = 0

    def generate_id(self, collection: str, namespace: str | None, zone: str | None) -> str:
        time.sleep(self._delay_seconds)
        with self._lock:
            self._issued += 1
            return f"g{self._issued}"


def test_concurrent_upserts_on_one_key_create_once() -> None:
    """Concurrent upserts sharing a match value should store one record."""
    store = MemStore(MemStoreConfig(), id_service=_SlowIdService(0.2))
    statuses: list[str] = []
    lock = threading.Lock()
    start = threading.Barrier(4)

    def upsert(index: int) -> None:
        start.wait()
        outcome = store.save_with_outcome(
            EntityDraft(ref=_USERS, data={"email": "a@x.io", "seen": index}),
            {"upsert$": ["email"]},
        )
        with lock:
            statuses.append(outcome.status)

    threads = [threading.Thread(target=upsert, args=(index,)) for index in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(store.list(_USERS, {"email": "a@x.io"})) == 1
    assert sorted(statuses) == ["created"] + ["upsert_matched"] * 3
