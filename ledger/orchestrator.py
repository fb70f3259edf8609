"""
Application wiring for Ledger

Builds the storage backend chosen in settings and hands it, together with
the configured tag rules and audit logger, to the filtering engine and the
record/tag services. Nothing below this module reads settings on its own.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from ledger.audit import AuditLogger
from ledger.config import AppSettings, get_settings
from ledger.filtering import CriteriaResolver, TagCanonicalizer
from ledger.services.filtering import RecordFilterEngine
from ledger.services.records import RecordService
from ledger.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStorage,
    InMemoryRecordStorage,
    RecordStorageInterface,
)
from ledger.services.tags import TagService

logger = structlog.get_logger("ledger.orchestrator")


@dataclass
class AppComponents:
    storage: RecordStorageInterface
    filter_engine: RecordFilterEngine
    records: RecordService
    tags: TagService
    audit_logger: AuditLogger


def create_app_components(
    app_settings: Optional[AppSettings] = None,
    storage: Optional[RecordStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.
    
    Args:
        app_settings: Settings to use; loaded from the environment if None.
        storage: Explicit storage backend, overriding storage_backend.
    """
    app_settings = app_settings or get_settings().app
    audit_logger = AuditLogger()
    
    if storage is None:
        if app_settings.storage_backend == "google_sheets":
            sheets_client = GoogleSheetsClient()
            storage = GoogleSheetsRecordStorage(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
        else:
            storage = InMemoryRecordStorage()
    
    logger.info(
        "app_components_created",
        storage=type(storage).__name__,
        environment=app_settings.app_environment,
    )
    
    canonicalizer = TagCanonicalizer(
        min_length=app_settings.tag_min_length,
        max_length=app_settings.tag_max_length,
    )
    
    return AppComponents(
        storage=storage,
        filter_engine=RecordFilterEngine(
            storage,
            resolver=CriteriaResolver(canonicalizer=canonicalizer),
            audit_logger=audit_logger,
        ),
        records=RecordService(storage, canonicalizer=canonicalizer, audit_logger=audit_logger),
        tags=TagService(storage, canonicalizer=canonicalizer, audit_logger=audit_logger),
        audit_logger=audit_logger,
    )
