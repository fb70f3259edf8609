"""
Audit Models for Ledger

Every significant action in the system is logged for audit purposes:
filter requests (accepted or rejected), record writes, vocabulary changes
and storage failures.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Filtering
    FILTER_EXECUTED = "filter_executed"
    FILTER_REJECTED = "filter_rejected"
    
    # Records
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    
    # Tag vocabulary
    TAGS_ADDED = "tags_added"
    TAG_RENAMED = "tag_renamed"
    TAGS_DELETED = "tags_deleted"
    
    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.
    
    This is the core unit of our audit trail.
    """
    
    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )
    
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO
    
    owner_id: Optional[str] = Field(
        default=None,
        description="User the event relates to"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'record', 'tag', 'filter')"
    )
    entity_id: Optional[str] = None
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events of one request"
    )
    
    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    
    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner_id": self.owner_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.
    
    Usage:
        event = AuditEventBuilder.filter_executed(owner_id, "ANY", 2, 14, correlation_id)
    """
    
    @staticmethod
    def filter_executed(
        owner_id: str,
        filter_criteria: str,
        executions: int,
        result_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILTER_EXECUTED,
            owner_id=owner_id,
            entity_type="filter",
            correlation_id=correlation_id,
            description=(
                f"Filter ({filter_criteria}) ran {executions} store "
                f"quer{'y' if executions == 1 else 'ies'}, {result_count} records"
            ),
            details={
                "filter_criteria": filter_criteria,
                "executions": executions,
                "result_count": result_count,
            },
        )
    
    @staticmethod
    def filter_rejected(
        owner_id: str,
        reason: str,
        errors: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILTER_REJECTED,
            severity=AuditSeverity.WARNING,
            owner_id=owner_id,
            entity_type="filter",
            correlation_id=correlation_id,
            description=f"Filter rejected: {reason}",
            details={
                "reason": reason,
                "errors": errors,
            },
        )
    
    @staticmethod
    def record_changed(
        event_type: AuditEventType,
        owner_id: str,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        verb = event_type.value.split("_", 1)[1]
        return AuditEvent(
            event_type=event_type,
            owner_id=owner_id,
            entity_type="record",
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Record {record_id} {verb}",
        )
    
    @staticmethod
    def tags_changed(
        event_type: AuditEventType,
        owner_id: str,
        tags: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            owner_id=owner_id,
            entity_type="tag",
            correlation_id=correlation_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {', '.join(tags)}"[:500],
            details={"tags": tags},
        )
    
    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        owner_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            owner_id=owner_id,
            correlation_id=correlation_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
