"""
Data Models Package

This package contains all Pydantic models used in Ledger.
"""

from ledger.models.record import (
    FieldError,
    FilterCriteria,
    Record,
    RecordFilter,
    RecordInput,
    RecordType,
    TypeCriteria,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "FieldError",
    "FilterCriteria",
    "Record",
    "RecordFilter",
    "RecordInput",
    "RecordType",
    "TypeCriteria",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
