"""Predefined rules for common string, number, collection and nullity checks.

Apart from the nullity rules, every rule here passes ``None``; require a value
with ``not_null()`` bound to the same field.
"""

import re
from collections.abc import Collection, Iterable
from typing import Any

from .composite import ReducerRule
from .rules import Rule


def not_null() -> Rule:
    return Rule("NULL_VALUE", lambda v: v is not None)


def is_null() -> Rule:
    return Rule("NOT_NULL_VALUE", lambda v: v is None)


def string_not_empty() -> Rule:
    """Fails on strings that are empty once surrounding whitespace is trimmed."""
    return Rule("STRING_EMPTY", lambda v: v is None or bool(v.strip()))


def string_max_length(max_length: int) -> Rule:
    return Rule(
        "STRING_TOO_LONG",
        lambda v: v is None or len(v) <= max_length,
        params={"maxLength": max_length},
    )


def string_matches(pattern: str) -> Rule:
    """Fails on strings that do not fully match ``pattern``."""
    compiled = re.compile(pattern)
    return Rule(
        "STRING_PATTERN_MISMATCH",
        lambda v: v is None or compiled.fullmatch(v) is not None,
        params={"pattern": pattern},
    )


def number_in_range(minimum: float, maximum: float) -> Rule:
    """Inclusive range check. Comparing a non-number raises, which is a configuration error."""
    if minimum > maximum:
        raise ValueError(f"minimum {minimum} is greater than maximum {maximum}")
    return Rule(
        "NUMBER_OUT_OF_RANGE",
        lambda v: v is None or minimum <= v <= maximum,
        params={"min": minimum, "max": maximum},
    )


def positive() -> Rule:
    return Rule("NUMBER_NOT_POSITIVE", lambda v: v is None or v > 0)


def collection_not_empty() -> Rule:
    return Rule("COLLECTION_EMPTY", lambda v: v is None or len(v) > 0)


def collection_max_size(max_size: int) -> Rule:
    return Rule(
        "COLLECTION_TOO_LARGE",
        lambda v: v is None or len(v) <= max_size,
        params={"maxSize": max_size},
    )


def one_of(allowed: Iterable[Any]) -> Rule:
    allowed_values = list(allowed)
    return Rule(
        "VALUE_NOT_ALLOWED",
        lambda v: v is None or v in allowed_values,
        params={"allowed": allowed_values},
    )


def count_set(values: Collection[Any]) -> int:
    """Number of values that are not None."""
    return sum(1 for v in values if v is not None)


def at_most_one_set(*fields: str) -> ReducerRule:
    return ReducerRule(
        "MORE_THAN_ONE_SET",
        fields,
        count_set,
        Rule("MORE_THAN_ONE_SET", lambda n: n <= 1),
    )


def exactly_one_set(*fields: str) -> ReducerRule:
    return ReducerRule(
        "NOT_EXACTLY_ONE_SET",
        fields,
        count_set,
        Rule("NOT_EXACTLY_ONE_SET", lambda n: n == 1),
    )


def all_or_none_set(*fields: str) -> ReducerRule:
    """Either every field is set or none is."""
    return ReducerRule(
        "PARTIALLY_SET",
        fields,
        count_set,
        Rule("PARTIALLY_SET", lambda n, total=len(fields): n in (0, total)),
    )
