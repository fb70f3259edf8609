"""Union of sub-query results, keyed by record identifier."""

from typing import Optional

from ledger.models.record import Record


def merge(
    primary: list[Record],
    secondary: Optional[list[Record]] = None,
) -> list[Record]:
    """
    Append secondary records whose id is not already in primary.
    
    Each side keeps its own relative order; nothing is re-sorted.
    """
    if secondary is None:
        return list(primary)
    
    merged = list(primary)
    seen = {record.id for record in primary}
    for record in secondary:
        if record.id not in seen:
            seen.add(record.id)
            merged.append(record)
    return merged
