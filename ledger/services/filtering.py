"""
Record Filtering Service

Flow:
1. Validate the criteria (no I/O yet)
2. Load the owner's tag vocabulary, only when tags were supplied
3. Plan the store executions (CriteriaResolver)
4. Run them one after the other; the first failure aborts the plan
5. Merge the results and audit the outcome

GUARANTEES:
- Read-only: records are never modified here
- Every validation-class error is raised before any record query
- No partial results: a failed store query surfaces as StoreFailure
"""

from typing import Optional
from uuid import UUID

from ledger.audit import AuditLogger, create_correlation_id
from ledger.errors import LedgerError, Unauthorized, store_failure
from ledger.filtering import CriteriaResolver, Predicate, SortSpec, merge
from ledger.models.record import Record, RecordFilter
from ledger.services.storage import RecordStorageInterface


class RecordFilterEngine:
    """
    Answers filter requests against injected storage.
    
    Stateless between calls; one instance can serve concurrent requests.
    """
    
    def __init__(
        self,
        storage: RecordStorageInterface,
        resolver: Optional[CriteriaResolver] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._resolver = resolver or CriteriaResolver()
        self._audit = audit_logger or AuditLogger()
    
    async def _load_vocabulary(
        self,
        owner_id: str,
        correlation_id: UUID,
    ) -> list[str]:
        try:
            vocabulary = await self._storage.load_vocabulary(owner_id)
        except Exception as e:
            await self._audit.log_storage_error("load_vocabulary", str(e), owner_id, correlation_id)
            raise store_failure(e, "Failed to filter records") from e
        
        if vocabulary is None:
            raise Unauthorized("User not found", 401)
        return vocabulary
    
    async def _execute(
        self,
        owner_id: str,
        predicate: Predicate,
        sort: SortSpec,
        correlation_id: UUID,
    ) -> list[Record]:
        try:
            return await self._storage.query_records(owner_id, predicate, sort)
        except Exception as e:
            await self._audit.log_storage_error("query_records", str(e), owner_id, correlation_id)
            raise store_failure(e, "Failed to filter records") from e
    
    async def filter_records(
        self,
        owner_id: str,
        criteria: RecordFilter,
        correlation_id: Optional[UUID] = None,
    ) -> list[Record]:
        """
        Return the owner's records matching the criteria, newest first per sub-query.
        
        Raises:
            ValidationFailed, NoValidTags, NoCriteria: before any record query
            Unauthorized: tags were supplied and the owner has no vocabulary
            StoreFailure: a storage call failed
        """
        correlation_id = correlation_id or create_correlation_id()
        
        try:
            self._resolver.check(criteria)
            vocabulary = []
            if criteria.tags:
                vocabulary = await self._load_vocabulary(owner_id, correlation_id)
            plan = self._resolver.resolve(criteria, vocabulary)
        except LedgerError as e:
            if e.status == 422:
                await self._audit.log_filter_rejected(
                    owner_id, type(e).__name__, e.errors, correlation_id
                )
            raise
        
        primary = None
        if plan.primary is not None:
            primary = await self._execute(owner_id, plan.primary, plan.sort, correlation_id)
        
        text_results = None
        if plan.text is not None:
            text_results = await self._execute(owner_id, plan.text, plan.sort, correlation_id)
        
        if primary is None:
            results = text_results
        else:
            results = merge(primary, text_results)
        
        await self._audit.log_filter_executed(
            owner_id=owner_id,
            filter_criteria=plan.filter_criteria.value,
            executions=len(plan.executions),
            result_count=len(results),
            correlation_id=correlation_id,
        )
        return results
