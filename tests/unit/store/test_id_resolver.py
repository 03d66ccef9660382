"""Unit tests for id acquisition policy."""

from __future__ import annotations

import pytest

from core.config import MemStoreConfig
from core.errors import IdGenerationError
from core.types import CollectionRef, EntityDraft
from store.id_resolver import IdResolver, RandomIdService

_REF = CollectionRef("bar", namespace="foo", zone="z1")


class _RecordingIdService:
    def __init__(self, generated: str = "svc-1") -> None:
        self.calls: list[tuple[str, str | None, str | None]] = []
        self._generated = generated

    def generate_id(self, collection: str, namespace: str | None, zone: str | None) -> str:
        self.calls.append((collection, namespace, zone))
        return self._generated


class _FailingIdService:
    def generate_id(self, collection: str, namespace: str | None, zone: str | None) -> str:
        raise RuntimeError("id service offline")


def test_explicit_id_wins() -> None:
    """An explicit draft id should be used without generating one."""
    service = _RecordingIdService()
    resolver = IdResolver(MemStoreConfig(generate_id=lambda draft: "local"), service)

    record_id = resolver.resolve(EntityDraft(ref=_REF, data={}, explicit_id="mine"))

    assert record_id == "mine" and service.calls == []


def test_local_generator_precedes_service() -> None:
    """A configured local generator should be tried before the service."""
    service = _RecordingIdService()
    resolver = IdResolver(MemStoreConfig(generate_id=lambda draft: "local-1"), service)

    assert resolver.resolve(EntityDraft(ref=_REF, data={})) == "local-1"


def test_service_used_when_local_generator_declines() -> None:
    """A local generator returning None should defer to the service."""
    service = _RecordingIdService()
    resolver = IdResolver(MemStoreConfig(generate_id=lambda draft: None), service)

    record_id = resolver.resolve(EntityDraft(ref=_REF, data={}))

    assert record_id == "svc-1" and service.calls == [("bar", "foo", "z1")]


def test_service_failure_raises_id_generation_error() -> None:
    """Service failures should surface as IdGenerationError."""
    resolver = IdResolver(MemStoreConfig(), _FailingIdService())

    with pytest.raises(IdGenerationError, match="id service offline"):
        resolver.resolve(EntityDraft(ref=_REF, data={}))


def test_empty_service_id_is_rejected() -> None:
    """An empty generated id cannot be used to store a record."""
    resolver = IdResolver(MemStoreConfig(), _RecordingIdService(generated=""))

    with pytest.raises(IdGenerationError):
        resolver.resolve(EntityDraft(ref=_REF, data={}))


def test_default_service_uses_configured_length() -> None:
    """Default ids should have the configured length."""
    resolver = IdResolver(MemStoreConfig(id_length=9))

    assert len(resolver.resolve(EntityDraft(ref=_REF, data={}))) == 9


def test_random_service_ids_are_lowercase_alphanumeric() -> None:
    """Random ids should only use digits and lowercase letters."""
    generated = RandomIdService(32).generate_id("bar", None, None)

    assert generated.isalnum() and generated == generated.lower()
