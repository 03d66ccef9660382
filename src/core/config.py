"""Runtime configuration model for memstore.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any, Callable

from core.constants import (
    DEFAULT_ID_LENGTH,
    DEFAULT_MERGE,
    FALSE_ENV_VALUES,
    TRUE_ENV_VALUES,
)
from core.errors import MemStoreConfigError

LocalIdGenerator = Callable[[Any], "str | None"]


@dataclass(frozen=True)
class MemStoreConfig:
    """Validated runtime configuration.

    Attributes:
        merge: Whether updates overlay previous record fields by default.
        id_length: Length of ids produced by the default id service.
        generate_id: Optional local id generator called with the draft.
    """

    merge: bool = DEFAULT_MERGE
    id_length: int = DEFAULT_ID_LENGTH
    generate_id: LocalIdGenerator | None = None

    @classmethod
    def from_env(cls) -> "MemStoreConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            MemStoreConfigError: If environment values are invalid.
        """
        merge_value = os.getenv("MEMSTORE_MERGE")
        id_length_value = os.getenv("MEMSTORE_ID_LENGTH", str(DEFAULT_ID_LENGTH))
        merge = DEFAULT_MERGE if merge_value is None else parse_bool_flag(merge_value)
        return cls(merge=merge, id_length=parse_id_length(id_length_value))


def parse_bool_flag(raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        MemStoreConfigError: If value is not a recognized boolean word.
    """
    normalized = raw_value.strip().lower()
    if normalized in TRUE_ENV_VALUES:
        return True
    if normalized in FALSE_ENV_VALUES:
        return False
    raise MemStoreConfigError(
        "Invalid MEMSTORE_MERGE value: "
        f"expected true/false, got '{raw_value}'. "
        "Set MEMSTORE_MERGE to true or false."
    )


def parse_id_length(raw_value: object) -> int:
    """Parse and validate the generated id length.

    Args:
        raw_value: Raw value from environment or options file.

    Returns:
        Positive id length.

    Raises:
        MemStoreConfigError: If value is not a positive integer.
    """
    if isinstance(raw_value, bool):
        raise MemStoreConfigError(
            "Invalid id length: expected a positive integer, got a boolean. "
            "Set MEMSTORE_ID_LENGTH to a number such as 6."
        )
    try:
        id_length = int(str(raw_value))
    except ValueError as error:
        raise MemStoreConfigError(
            "Invalid id length: "
            f"expected integer, got '{raw_value}'. "
            "Set MEMSTORE_ID_LENGTH to a numeric value."
        ) from error
    if id_length <= 0:
        raise MemStoreConfigError(
            f"Invalid id length {id_length}: ids need at least one character. "
            "Set MEMSTORE_ID_LENGTH to a positive value."
        )
    return id_length
