"""
Record Filtering Engine.

Pure, storage-free pieces: predicate tree, range builder, tag
canonicalization, criteria validation, query planning and result merging.
The I/O-facing entry point is ledger.services.filtering.RecordFilterEngine.
"""

from ledger.filtering.merger import merge
from ledger.filtering.predicates import (
    NEWEST_FIRST,
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
from ledger.filtering.ranges import build_range
from ledger.filtering.resolver import CriteriaResolver, ResolvedQuery
from ledger.filtering.tags import TagCanonicalizer, filter_duplicate_tags, trim_tags
from ledger.filtering.validator import CriteriaValidator, validate_record_input

__all__ = [
    "NEWEST_FIRST",
    "And",
    "ContainsAll",
    "ContainsAny",
    "CriteriaResolver",
    "CriteriaValidator",
    "Exact",
    "Or",
    "Predicate",
    "Range",
    "ResolvedQuery",
    "SortSpec",
    "TagCanonicalizer",
    "TextSearch",
    "build_range",
    "filter_duplicate_tags",
    "merge",
    "trim_tags",
    "validate_record_input",
]
