"""
Query Planner

Turns a RecordFilter into the store executions needed to answer it.

DESIGN DECISION: All combination logic lives here and produces an abstract
predicate tree. Storage adapters only ever see one predicate at a time.

COMBINATION MODES:
- ALL: one conjunctive query. The description (if any) is AND-ed in as a
  text-search predicate.
- ANY: a store cannot reliably OR a text search with other predicate
  types, so the plan is split into a disjunction of the non-text
  predicates and a separate text-search-only query. Their results are
  unioned by ResultMerger.

Every validation-class error is raised here, before any I/O.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ledger.errors import NoCriteria, ValidationFailed
from ledger.filtering.predicates import (
    NEWEST_FIRST,
    ContainsAll,
    ContainsAny,
    Exact,
    Predicate,
    SortSpec,
    TextSearch,
    all_of,
    any_of,
)
from ledger.filtering.ranges import build_range
from ledger.filtering.tags import TagCanonicalizer
from ledger.filtering.validator import CriteriaValidator
from ledger.models.record import FilterCriteria, RecordFilter, TypeCriteria


@dataclass(frozen=True)
class ResolvedQuery:
    """
    Planned store executions.
    
    primary is the combined non-text query (or the single ALL query);
    text is the separate text-search query used in ANY mode.
    """
    filter_criteria: FilterCriteria
    primary: Optional[Predicate] = None
    text: Optional[TextSearch] = None
    tags: tuple = ()
    sort: SortSpec = field(default=NEWEST_FIRST)
    
    @property
    def executions(self) -> list[Predicate]:
        return [p for p in (self.primary, self.text) if p is not None]


class CriteriaResolver:
    """Validates criteria and assembles per-field predicates into a plan."""
    
    def __init__(
        self,
        validator: Optional[CriteriaValidator] = None,
        canonicalizer: Optional[TagCanonicalizer] = None,
    ):
        self._validator = validator or CriteriaValidator()
        self._canonicalizer = canonicalizer or TagCanonicalizer()
    
    def check(self, criteria: RecordFilter) -> None:
        """Raise ValidationFailed with every field error, if any."""
        errors = self._validator.validate(criteria)
        if errors:
            raise ValidationFailed(errors)
    
    def field_predicates(
        self,
        criteria: RecordFilter,
        tags: list[str],
    ) -> list[Predicate]:
        """Non-text per-field predicates, in a fixed order (id, date, amount, type, tags)."""
        predicates = [
            build_range("id", criteria.id_start, criteria.id_end),
            build_range("date", criteria.date_start, criteria.date_end),
            build_range("amount", criteria.amount_start, criteria.amount_end),
        ]
        
        if criteria.type != TypeCriteria.ANY:
            predicates.append(Exact("type", criteria.type.value))
        
        if tags:
            if criteria.tags_type == FilterCriteria.ALL:
                predicates.append(ContainsAll("tags", tuple(tags)))
            else:
                predicates.append(ContainsAny("tags", tuple(tags)))
        
        return [p for p in predicates if p is not None]
    
    def resolve(
        self,
        criteria: RecordFilter,
        vocabulary: Iterable[str],
    ) -> ResolvedQuery:
        """
        Build the plan for a filter request.
        
        Raises:
            ValidationFailed: with every field error found
            NoValidTags: tags were supplied but none is in the vocabulary
            NoCriteria: nothing to filter on
        """
        self.check(criteria)
        
        tags = self._canonicalizer.resolve_required(criteria.tags, vocabulary)
        predicates = self.field_predicates(criteria, tags)
        search_text = criteria.search_text
        
        if not predicates and not search_text:
            raise NoCriteria()
        
        text = TextSearch(search_text) if search_text else None
        
        if criteria.filter_criteria == FilterCriteria.ALL:
            conds = predicates + ([text] if text else [])
            return ResolvedQuery(
                filter_criteria=FilterCriteria.ALL,
                primary=all_of(conds),
                tags=tuple(tags),
            )
        
        return ResolvedQuery(
            filter_criteria=FilterCriteria.ANY,
            primary=any_of(predicates) if predicates else None,
            text=text,
            tags=tuple(tags),
        )
