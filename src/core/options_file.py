"""YAML store options loading.

This module reads declarative store options files used by CLI workflows.
It validates one strict schema and overlays it on a base config.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Mapping, cast

from core.config import MemStoreConfig, parse_id_length
from core.constants import SUPPORTED_OPTION_KEYS
from core.errors import MemStoreConfigError, MemStoreDependencyError


def load_store_options(options_path: str, base: MemStoreConfig | None = None) -> MemStoreConfig:
    """Load a YAML options file and apply it to a config.

    Args:
        options_path: File path to YAML options.
        base: Config to overlay; environment config when omitted.

    Returns:
        Config with file values applied.

    Raises:
        MemStoreDependencyError: If PyYAML is unavailable.
        MemStoreConfigError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(options_path)
    options = _expect_mapping(payload, "store options root")
    _validate_option_keys(options)
    config = base if base is not None else MemStoreConfig.from_env()
    if "merge" in options:
        config = replace(config, merge=_parse_merge(options["merge"]))
    if "id_length" in options:
        config = replace(config, id_length=parse_id_length(options["id_length"]))
    return config


def _load_yaml_payload(options_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise MemStoreDependencyError(
            "YAML options support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    options_file = Path(options_path).expanduser().resolve()
    if not options_file.exists():
        raise MemStoreConfigError(
            f"Options file does not exist at {options_file}. Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(options_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise MemStoreConfigError(
            f"Failed to read options at {options_file}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise MemStoreConfigError(
            f"Failed to parse YAML options at {options_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return {}
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise MemStoreConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise MemStoreConfigError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _parse_merge(raw_value: object) -> bool:
    if isinstance(raw_value, bool):
        return raw_value
    raise MemStoreConfigError("Options field 'merge' must be true or false when provided.")


def _validate_option_keys(options: Mapping[str, object]) -> None:
    unknown_keys = sorted(set(options) - set(SUPPORTED_OPTION_KEYS))
    if unknown_keys:
        raise MemStoreConfigError(
            f"Store options contain unknown fields: {', '.join(unknown_keys)}. "
            f"Use only: {', '.join(SUPPORTED_OPTION_KEYS)}."
        )
