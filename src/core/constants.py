"""Core constants used across memstore modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

STORE_NAME = "mem-store"
ID_FIELD = "id"
ENTITY_TAG_FIELD = "entity$"
MISSING_CANON_PART = "-"
MODIFIER_MARKER = "$"
DEFAULT_ID_LENGTH = 6
DEFAULT_MERGE = True
ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
DUPLICATE_ID_MESSAGE = "Entity of type {type} with id = {id} already exists."
SUPPORTED_OPTION_KEYS = ("merge", "id_length")
TRUE_ENV_VALUES = ("1", "true", "yes", "on")
FALSE_ENV_VALUES = ("0", "false", "no", "off")
