"""
Record Service

Create, edit, delete and list a user's records.

DESIGN DECISION: Records are immutable value objects. An edit builds a new
Record from the stored one with model_copy(update=...) and then persists it
explicitly.
"""

from datetime import datetime
from typing import Callable, Optional

from ledger.audit import AuditLogger
from ledger.errors import NotFound, Unauthorized, ValidationFailed, common_error_handler
from ledger.filtering import NEWEST_FIRST, TagCanonicalizer, validate_record_input
from ledger.models.audit import AuditEventType
from ledger.models.record import FieldError, Record, RecordInput, RecordType
from ledger.services.storage import RecordStorageInterface


class RecordService:
    """Validate-then-persist operations on records."""
    
    def __init__(
        self,
        storage: RecordStorageInterface,
        canonicalizer: Optional[TagCanonicalizer] = None,
        audit_logger: Optional[AuditLogger] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self._storage = storage
        self._canonicalizer = canonicalizer or TagCanonicalizer()
        self._audit = audit_logger or AuditLogger()
        self._now = now
    
    async def _vocabulary(self, owner_id: str) -> list[str]:
        vocabulary = await self._storage.load_vocabulary(owner_id)
        if vocabulary is None:
            raise Unauthorized("User not found", 401)
        return vocabulary
    
    def _check_input(self, record: RecordInput) -> None:
        errors = validate_record_input(record, self._now)
        if errors:
            raise ValidationFailed(errors)
    
    async def create_record(self, owner_id: str, record: RecordInput) -> Record:
        self._check_input(record)
        
        try:
            vocabulary = await self._vocabulary(owner_id)
            tags = self._canonicalizer.resolve_required(record.tags, vocabulary)
            
            saved = await self._storage.save_record(Record(
                id=self._storage.next_record_id(),
                owner_id=owner_id,
                date=record.date,
                amount=record.amount,
                type=RecordType(record.type),
                tags=tags,
                description=record.description.strip(),
            ))
        except Exception as e:
            common_error_handler(e, "Failed to create record")
        
        await self._audit.log_record_changed(AuditEventType.RECORD_CREATED, owner_id, saved.id)
        return saved
    
    async def edit_record(self, owner_id: str, record: RecordInput) -> Record:
        if not record.id:
            raise ValidationFailed([FieldError(message="_id is required", field="_id")])
        self._check_input(record)
        
        try:
            existing = await self._storage.get_record(owner_id, record.id)
            if existing is None:
                raise NotFound("Record not found", 404)
            
            vocabulary = await self._vocabulary(owner_id)
            tags = self._canonicalizer.resolve_required(record.tags, vocabulary)
            
            updated = existing.model_copy(update={
                "date": record.date,
                "amount": record.amount,
                "type": RecordType(record.type),
                "tags": tuple(tags),
                "description": record.description.strip(),
            })
            saved = await self._storage.save_record(updated)
        except Exception as e:
            common_error_handler(e, "Failed to edit record")
        
        await self._audit.log_record_changed(AuditEventType.RECORD_UPDATED, owner_id, saved.id)
        return saved
    
    async def delete_record(self, owner_id: str, record_id: str) -> Record:
        try:
            existing = await self._storage.get_record(owner_id, record_id)
            if existing is None:
                raise NotFound("Record not found", 404)
            await self._storage.delete_record(owner_id, record_id)
        except Exception as e:
            common_error_handler(e, "Failed to delete record")
        
        await self._audit.log_record_changed(AuditEventType.RECORD_DELETED, owner_id, record_id)
        return existing
    
    async def list_records(self, owner_id: str) -> list[Record]:
        """All of the owner's records, newest first."""
        try:
            await self._vocabulary(owner_id)
            return await self._storage.list_records(owner_id, NEWEST_FIRST)
        except Exception as e:
            common_error_handler(e, "Failed to list records")
