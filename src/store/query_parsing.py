"""Conversion of caller query shapes into QuerySpec.

Callers may pass an id, a list of ids, or a filter mapping whose
``$``-suffixed keys (``sort$``, ``skip$``, ``limit$``, ``fields$``,
``load$``, ``all$``, ``upsert$``) carry query modifiers. Modifiers are
lifted into dedicated QuerySpec fields; unknown ones are dropped.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.types import QuerySpec, SortDirective
from store.record_matcher import is_modifier_key

QueryInput = QuerySpec | Mapping[str, Any] | list[Any] | tuple[Any, ...] | str | int | None


def parse_query(raw_query: QueryInput) -> QuerySpec:
    """Normalize any supported query shape.

    Args:
        raw_query: QuerySpec, id, id list, filter mapping, or None.

    Returns:
        Structured query.

    Raises:
        TypeError: If the query has an unsupported type.
    """
    if isinstance(raw_query, QuerySpec):
        return raw_query
    if raw_query is None:
        return QuerySpec()
    if isinstance(raw_query, str):
        return QuerySpec.by_id(raw_query)
    if isinstance(raw_query, int) and not isinstance(raw_query, bool):
        return QuerySpec.by_id(str(raw_query))
    if isinstance(raw_query, (list, tuple)):
        return QuerySpec.by_ids([str(record_id) for record_id in raw_query])
    if isinstance(raw_query, Mapping):
        return _parse_mapping(raw_query)
    raise TypeError(
        f"Unsupported query type {type(raw_query).__name__}: "
        "use an id, a list of ids, a filter mapping, or QuerySpec."
    )


def _parse_mapping(raw_query: Mapping[str, Any]) -> QuerySpec:
    filter_spec = {key: value for key, value in raw_query.items() if not is_modifier_key(key)}
    return QuerySpec(
        filter=filter_spec,
        sort=_parse_sort(raw_query.get("sort$")),
        skip=_optional_int(raw_query.get("skip$")),
        limit=_optional_int(raw_query.get("limit$")),
        fields=_optional_names(raw_query.get("fields$")),
        load_removed=raw_query.get("load$") is True,
        remove_all=bool(raw_query.get("all$")),
        upsert_on=_optional_names(raw_query.get("upsert$")),
    )


def _parse_sort(raw_sort: object) -> SortDirective | None:
    """Take the first key of a ``{field: direction}`` mapping."""
    if not isinstance(raw_sort, Mapping) or not raw_sort:
        return None
    sort_field, raw_direction = next(iter(raw_sort.items()))
    descending = (
        isinstance(raw_direction, (int, float))
        and not isinstance(raw_direction, bool)
        and raw_direction < 0
    )
    return SortDirective(field=str(sort_field), descending=descending)


def _optional_int(raw_value: object) -> int | None:
    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        return None
    return raw_value


def _optional_names(raw_value: object) -> tuple[str, ...] | None:
    if not isinstance(raw_value, (list, tuple)):
        return None
    return tuple(name for name in raw_value if isinstance(name, str))
