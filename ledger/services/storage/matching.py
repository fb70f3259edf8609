"""
In-process evaluation of the predicate tree.

Used by storage adapters that cannot push predicates down to their
backend (in-memory, Google Sheets), so records are filtered in Python.
"""

import re
from typing import Iterable

from ledger.filtering.predicates import (
    And,
    ContainsAll,
    ContainsAny,
    Exact,
    Or,
    Predicate,
    Range,
    SortSpec,
    TextSearch,
)
from ledger.models.record import Record

_WORD = re.compile(r"\w+")


def _field_value(record: Record, field: str):
    value = getattr(record, field)
    # Enums compare by their wire value
    return getattr(value, "value", value)


def _words(text: str) -> set[str]:
    return {word.casefold() for word in _WORD.findall(text)}


def text_matches(description: str, text: str) -> bool:
    """Any search term equal to a word of the description (case-insensitive)."""
    terms = _words(text)
    return bool(terms & _words(description))


def matches(record: Record, predicate: Predicate) -> bool:
    """Does a record satisfy a predicate?"""
    if isinstance(predicate, And):
        return all(matches(record, cond) for cond in predicate.conds)
    if isinstance(predicate, Or):
        return any(matches(record, cond) for cond in predicate.conds)
    if isinstance(predicate, TextSearch):
        return text_matches(record.description, predicate.text)
    
    if isinstance(predicate, Exact):
        return _field_value(record, predicate.field) == predicate.value
    if isinstance(predicate, Range):
        value = _field_value(record, predicate.field)
        if predicate.gte is not None and value < predicate.gte:
            return False
        if predicate.lte is not None and value > predicate.lte:
            return False
        return True
    if isinstance(predicate, ContainsAll):
        return all(tag in _field_value(record, predicate.field) for tag in predicate.values)
    if isinstance(predicate, ContainsAny):
        return any(tag in _field_value(record, predicate.field) for tag in predicate.values)
    
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def sort_records(records: Iterable[Record], sort: SortSpec) -> list[Record]:
    return sorted(
        records,
        key=lambda record: _field_value(record, sort.field),
        reverse=sort.descending,
    )
