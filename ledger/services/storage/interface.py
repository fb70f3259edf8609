"""
Abstract Storage Interface

DESIGN DECISION: The filtering engine and the services talk to storage only
through these interfaces. This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep the predicate-combination logic free of any store's query syntax

Record queries receive an abstract predicate tree (ledger.filtering.predicates)
and must return matches in the requested order.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledger.filtering.predicates import Predicate, SortSpec
from ledger.models.audit import AuditEvent
from ledger.models.record import Record


class RecordStorageInterface(ABC):
    """
    Abstract interface for record and tag vocabulary storage.
    
    Every operation is scoped to one owner.
    """
    
    @abstractmethod
    async def load_vocabulary(self, owner_id: str) -> Optional[list[str]]:
        """
        Return the owner's tag vocabulary.
        
        Returns:
            The vocabulary, or None if the owner does not exist
        """
        pass
    
    @abstractmethod
    async def save_vocabulary(self, owner_id: str, tags: list[str]) -> None:
        """Replace the owner's tag vocabulary."""
        pass
    
    @abstractmethod
    async def query_records(
        self,
        owner_id: str,
        predicate: Predicate,
        sort: SortSpec,
    ) -> list[Record]:
        """
        Execute one predicate against the owner's records.
        
        Returns:
            Matching records in the requested order
            
        Raises:
            StorageError: If the query fails
        """
        pass
    
    @abstractmethod
    async def list_records(self, owner_id: str, sort: SortSpec) -> list[Record]:
        """All of the owner's records in the requested order."""
        pass
    
    @abstractmethod
    async def get_record(self, owner_id: str, record_id: str) -> Optional[Record]:
        """
        Retrieve one of the owner's records.
        
        Returns:
            The record if found, None otherwise
        """
        pass
    
    @abstractmethod
    async def save_record(self, record: Record) -> Record:
        """Insert or replace a record (keyed by owner and id)."""
        pass
    
    @abstractmethod
    async def delete_record(self, owner_id: str, record_id: str) -> bool:
        """
        Delete one of the owner's records.
        
        Returns:
            True if a record was deleted
        """
        pass
    
    @abstractmethod
    def next_record_id(self) -> str:
        """New identifier that sorts after every identifier issued before it."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.
    
    Audit logs are append-only - we never delete or modify them.
    """
    
    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.
        
        Returns:
            True if logged successfully
        """
        pass
    
    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Events of one request, in chronological order."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
