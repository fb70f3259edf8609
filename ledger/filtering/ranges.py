"""Range predicate builder for optional bounded ranges (id, date, amount)."""

from typing import Any, Optional, Union

from ledger.filtering.predicates import Exact, Range


def build_range(
    field: str,
    start: Optional[Any] = None,
    end: Optional[Any] = None,
) -> Optional[Union[Exact, Range]]:
    """
    Build the predicate for one ordered field.
    
    Equal bounds (by string form) collapse to an exact match. No ordering
    check happens here; CriteriaValidator reports inverted ranges.
    """
    if start is not None and end is not None:
        if str(start) == str(end):
            return Exact(field, start)
        return Range(field, gte=start, lte=end)
    if start is not None:
        return Range(field, gte=start)
    if end is not None:
        return Range(field, lte=end)
    return None
