"""
Abstract predicate tree emitted by the filtering engine.

Storage adapters lower these nodes onto whatever they run on; the engine
never speaks a store's native query syntax.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Exact:
    field: str
    value: Any


@dataclass(frozen=True)
class Range:
    """Inclusive range; a missing bound is unbounded."""
    field: str
    gte: Optional[Any] = None
    lte: Optional[Any] = None


@dataclass(frozen=True)
class ContainsAll:
    """Array field must contain every value."""
    field: str
    values: tuple


@dataclass(frozen=True)
class ContainsAny:
    """Array field must contain at least one value."""
    field: str
    values: tuple


@dataclass(frozen=True)
class TextSearch:
    """Full-text search over the record description."""
    text: str


@dataclass(frozen=True)
class And:
    conds: tuple


@dataclass(frozen=True)
class Or:
    conds: tuple


Predicate = Union[Exact, Range, ContainsAll, ContainsAny, TextSearch, And, Or]


@dataclass(frozen=True)
class SortSpec:
    field: str = "id"
    descending: bool = True


# Most recently created first
NEWEST_FIRST = SortSpec(field="id", descending=True)


def all_of(conds: list) -> Predicate:
    """Conjunction, unwrapped when there is a single condition."""
    if len(conds) == 1:
        return conds[0]
    return And(tuple(conds))


def any_of(conds: list) -> Predicate:
    """Disjunction, unwrapped when there is a single condition."""
    if len(conds) == 1:
        return conds[0]
    return Or(tuple(conds))
