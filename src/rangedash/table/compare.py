"""Comparators and search matchers selected by column kind.

String ordering follows the usual locale collation rules without depending
on the process locale: accents and case are ignored first, then accents
break ties, then lowercase sorts before uppercase. ``"ann"`` therefore
sorts before ``"Bob"``, and ``"é"`` sits next to ``"e"`` rather than after
``"z"``.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from rangedash.table.columns import ColumnKind, SortDirection

Comparator = Callable[[Any, Any], float]
Matcher = Callable[[Any, str], bool]


@lru_cache(maxsize=4096)
def collation_key(text: str) -> tuple[str, str, tuple[bool, ...]]:
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), tuple(ch.isupper() for ch in base)


def locale_compare(left: str, right: str) -> int:
    left_key = collation_key(left)
    right_key = collation_key(right)
    return (left_key > right_key) - (left_key < right_key)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def compare_strings(left: Any, right: Any) -> int:
    return locale_compare(_as_text(left), _as_text(right))


def compare_numbers(left: Any, right: Any) -> float:
    """Numeric difference; missing values sort after every number."""
    if left is None or right is None:
        return (left is None) - (right is None)
    return left - right


def compare_coerced(left: Any, right: Any) -> int:
    """Fallback for dates and anything else: compare the string forms."""
    return locale_compare(_as_text(left), _as_text(right))


_COMPARATORS: dict[ColumnKind, Comparator] = {
    ColumnKind.STRING: compare_strings,
    ColumnKind.NUMBER: compare_numbers,
}


def comparator_for(kind: ColumnKind, direction: SortDirection = SortDirection.ASC) -> Comparator:
    """Pick the comparator for *kind*; ``DESC`` negates the ascending one."""
    ascending = _COMPARATORS.get(kind, compare_coerced)
    if direction is SortDirection.ASC:
        return ascending

    def descending(left: Any, right: Any) -> float:
        return -ascending(left, right)

    return descending


def number_text(value: Any) -> str:
    """Decimal string form used for number search (``40.0`` -> ``"40"``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _match_string(value: Any, term: str) -> bool:
    if value is None:
        return False
    return term.casefold() in str(value).casefold()


def _match_number(value: Any, term: str) -> bool:
    if value is None:
        return False
    return term in number_text(value)


def _never(value: Any, term: str) -> bool:
    return False


_MATCHERS: dict[ColumnKind, Matcher] = {
    ColumnKind.STRING: _match_string,
    ColumnKind.NUMBER: _match_number,
}


def matcher_for(kind: ColumnKind) -> Matcher:
    return _MATCHERS.get(kind, _never)
