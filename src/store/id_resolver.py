"""Id acquisition for newly created records.

This module applies a three-tier policy: an explicit id on the draft,
then the configured local generator, then the external id service.
"""

from __future__ import annotations

import secrets
from typing import Protocol

from core.config import MemStoreConfig
from core.constants import DEFAULT_ID_LENGTH, ID_ALPHABET
from core.errors import IdGenerationError
from core.logging_config import get_logger
from core.types import CollectionRef, EntityDraft

_LOGGER = get_logger(__name__)


class IdService(Protocol):
    """External id generation collaborator."""

    def generate_id(self, collection: str, namespace: str | None, zone: str | None) -> str:
        """Return a fresh id for the collection."""


class RandomIdService:
    """Default id service producing short random alphanumeric ids."""

    def __init__(self, id_length: int = DEFAULT_ID_LENGTH) -> None:
        self._id_length = id_length

    def generate_id(self, collection: str, namespace: str | None, zone: str | None) -> str:
        return "".join(secrets.choice(ID_ALPHABET) for _ in range(self._id_length))


class IdResolver:
    """Resolve ids for drafts on the create path."""

    def __init__(self, config: MemStoreConfig, id_service: IdService | None = None) -> None:
        """Initialize the resolver.

        Args:
            config: Runtime configuration with the optional local generator.
            id_service: External fallback; random ids when omitted.
        """
        self._local_generator = config.generate_id
        self._id_service = id_service or RandomIdService(config.id_length)

    def resolve(self, draft: EntityDraft) -> str:
        """Return the id a new record should be created under.

        Args:
            draft: New entity draft.

        Returns:
            Resolved id string.

        Raises:
            IdGenerationError: If the external id service fails.
        """
        if draft.explicit_id is not None:
            return str(draft.explicit_id)
        if self._local_generator is not None:
            local_id = self._local_generator(draft)
            if local_id is not None and local_id != "":
                return str(local_id)
        return self._request_external_id(draft.ref)

    def _request_external_id(self, ref: CollectionRef) -> str:
        try:
            generated = self._id_service.generate_id(ref.collection, ref.namespace, ref.zone)
        except Exception as error:
            _LOGGER.warning("id_generation_failed", canon=ref.canon, error=str(error))
            raise IdGenerationError(
                f"Failed to generate an id for {ref.canon}: {error}. "
                "Check the id service or save with an explicit id."
            ) from error
        if not generated:
            raise IdGenerationError(
                f"Id service returned an empty id for {ref.canon}. "
                "Check the id service or save with an explicit id."
            )
        return str(generated)
