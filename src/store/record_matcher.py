"""Record predicate evaluation.

This module decides whether one stored record satisfies one filter.
It is pure and never raises for unsupported operators or odd values.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Mapping

from core.constants import MODIFIER_MARKER

_MISSING = object()


def is_modifier_key(key: str) -> bool:
    """Return whether a raw query key is a modifier rather than a field."""
    return MODIFIER_MARKER in key


def values_equal(left: Any, right: Any) -> bool:
    """Compare two field values without type coercion.

    Numbers compare by value across int and float, booleans only
    equal booleans, and every other value needs matching types. An
    absent field equals nothing, not even None.
    """
    if left is _MISSING or right is _MISSING:
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    return bool(left == right)


def matches(record: Mapping[str, Any], filter_spec: Mapping[str, Any]) -> bool:
    """Evaluate a filter against one record.

    Args:
        record: Stored record fields.
        filter_spec: Field predicates; list values test membership,
            mapping values carry comparison operators.

    Returns:
        True when every non-modifier filter key passes.
    """
    for key, expected in filter_spec.items():
        if is_modifier_key(key):
            continue
        value = record.get(key, _MISSING)
        if isinstance(expected, (list, tuple)):
            if not _contains(expected, value):
                return False
        elif isinstance(expected, Mapping):
            if not _passes_operators(expected, value):
                return False
        elif not values_equal(expected, value):
            return False
    return True


def fields_equal(record: Mapping[str, Any], match_by: Mapping[str, Any]) -> bool:
    """Return whether the record holds equal values for every given field."""
    for key, expected in match_by.items():
        if not values_equal(expected, record.get(key, _MISSING)):
            return False
    return True


def _passes_operators(operators: Mapping[str, Any], value: Any) -> bool:
    """Apply comparison operators; the first failing one rejects the record."""
    for name, fails in _OPERATOR_CHECKS:
        operand = operators.get(name)
        if operand is not None and fails(operand, value):
            return False
    return True


def _contains(candidates: Any, value: Any) -> bool:
    return any(values_equal(candidate, value) for candidate in candidates)


def safe_compare(compare: Callable[[Any, Any], Any], left: Any, right: Any) -> bool:
    """Apply an ordering operator, treating incomparable values as False."""
    try:
        return bool(compare(left, right))
    except TypeError:
        return False


def _fails_in(operand: Any, value: Any) -> bool:
    if not isinstance(operand, (list, tuple)):
        return False
    return not _contains(operand, value)


def _fails_not_in(operand: Any, value: Any) -> bool:
    if not isinstance(operand, (list, tuple)):
        return False
    return _contains(operand, value)


_OPERATOR_CHECKS: tuple[tuple[str, Callable[[Any, Any], bool]], ...] = (
    ("$ne", values_equal),
    ("$gte", lambda operand, value: safe_compare(operator.gt, operand, value)),
    ("$gt", lambda operand, value: safe_compare(operator.ge, operand, value)),
    ("$lt", lambda operand, value: safe_compare(operator.le, operand, value)),
    ("$lte", lambda operand, value: safe_compare(operator.lt, operand, value)),
    ("$in", _fails_in),
    ("$nin", _fails_not_in),
)
