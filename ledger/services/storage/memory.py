"""
In-Memory Storage Implementation

Used by the test suite and for local runs without a backend. Predicates
are evaluated in Python with the shared matching module.
"""

from typing import Iterable, Optional
from uuid import UUID

from ledger.filtering.predicates import Predicate, SortSpec
from ledger.models.audit import AuditEvent
from ledger.models.record import Record
from ledger.services.storage.ids import new_record_id
from ledger.services.storage.interface import (
    AuditStorageInterface,
    RecordStorageInterface,
)
from ledger.services.storage.matching import matches, sort_records


class InMemoryRecordStorage(RecordStorageInterface):
    """Records and vocabularies held in dictionaries keyed by owner."""
    
    def __init__(self):
        self._vocabularies: dict[str, list[str]] = {}
        self._records: dict[str, dict[str, Record]] = {}
    
    def add_owner(self, owner_id: str, tags: Optional[list[str]] = None) -> None:
        self._vocabularies[owner_id] = list(tags or [])
        self._records.setdefault(owner_id, {})
    
    def add_records(self, records: Iterable[Record]) -> None:
        """Seed records synchronously, each under its own owner."""
        for record in records:
            self._records.setdefault(record.owner_id, {})[record.id] = record
    
    async def load_vocabulary(self, owner_id: str) -> Optional[list[str]]:
        vocabulary = self._vocabularies.get(owner_id)
        return list(vocabulary) if vocabulary is not None else None
    
    async def save_vocabulary(self, owner_id: str, tags: list[str]) -> None:
        self._vocabularies[owner_id] = list(tags)
        self._records.setdefault(owner_id, {})
    
    async def query_records(
        self,
        owner_id: str,
        predicate: Predicate,
        sort: SortSpec,
    ) -> list[Record]:
        owned = self._records.get(owner_id, {}).values()
        return sort_records(
            (record for record in owned if matches(record, predicate)),
            sort,
        )
    
    async def list_records(self, owner_id: str, sort: SortSpec) -> list[Record]:
        return sort_records(self._records.get(owner_id, {}).values(), sort)
    
    async def get_record(self, owner_id: str, record_id: str) -> Optional[Record]:
        return self._records.get(owner_id, {}).get(record_id)
    
    async def save_record(self, record: Record) -> Record:
        self.add_records([record])
        return record
    
    async def delete_record(self, owner_id: str, record_id: str) -> bool:
        return self._records.get(owner_id, {}).pop(record_id, None) is not None
    
    def next_record_id(self) -> str:
        return new_record_id()


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""
    
    def __init__(self):
        self.events: list[AuditEvent] = []
    
    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
    
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        related = [e for e in self.events if e.correlation_id == correlation_id]
        return sorted(related, key=lambda e: e.timestamp)
