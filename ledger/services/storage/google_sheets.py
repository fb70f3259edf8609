"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is a storage backend a non-technical user can
open and read directly.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (we handle this with careful ordering)
- No query capabilities, so predicates are evaluated in Python with the
  shared matching module

The implementation follows the abstract interface, so it can be swapped
without changing the filtering engine.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from ledger.config import get_settings
from ledger.filtering.predicates import Predicate, SortSpec
from ledger.models.audit import AuditEvent, AuditEventType, AuditSeverity
from ledger.models.record import Record, RecordType
from ledger.services.storage.ids import new_record_id
from ledger.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    RecordStorageInterface,
    StorageError,
)
from ledger.services.storage.matching import matches, sort_records


RECORD_COLUMNS = [
    "id",
    "owner_id",
    "date",
    "amount",
    "type",
    "tags_json",
    "description",
]

TAG_COLUMNS = [
    "owner_id",
    "tags_json",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "owner_id",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
]

_retry_api = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.
    
    Handles authentication and provides retry logic for API calls.
    """
    
    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets
    
    @_retry_api
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.
        
        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=["https://www.googleapis.com/auth/spreadsheets"],
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e
        
        return self._client
    
    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet
    
    def _get_or_create(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(title=title, rows=rows, cols=len(columns))
            sheet.append_row(columns)
        return sheet
    
    def get_records_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.records_sheet_name, RECORD_COLUMNS, 1000)
    
    def get_tags_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.tags_sheet_name, TAG_COLUMNS, 100)
    
    def get_audit_sheet(self) -> gspread.Worksheet:
        return self._get_or_create(self._settings.audit_sheet_name, AUDIT_COLUMNS, 5000)


class GoogleSheetsRecordStorage(RecordStorageInterface):
    """
    Google Sheets implementation of record storage.
    
    One record per row in the Records sheet, one vocabulary per row in the
    Tags sheet. Tag lists are JSON-serialized.
    """
    
    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
    
    def _record_to_row(self, record: Record) -> list:
        return [
            record.id,
            record.owner_id,
            record.date.isoformat(),
            str(record.amount),
            record.type.value,
            json.dumps(list(record.tags)),
            record.description,
        ]
    
    def _row_to_record(self, row: list) -> Record:
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default
        
        return Record(
            id=safe_get(0),
            owner_id=safe_get(1),
            date=datetime.fromisoformat(safe_get(2)),
            amount=Decimal(safe_get(3)),
            type=RecordType(safe_get(4)),
            tags=json.loads(safe_get(5, "[]")),
            description=safe_get(6),
        )
    
    def _owned_records(self, owner_id: str) -> list[Record]:
        all_rows = self._client.get_records_sheet().get_all_values()[1:]
        records = []
        for row in all_rows:
            if len(row) < 2 or row[1] != owner_id:
                continue
            try:
                records.append(self._row_to_record(row))
            except ValueError:
                continue  # Skip malformed rows
        return records
    
    def _find_row(self, sheet: gspread.Worksheet, key: tuple, key_columns: tuple) -> Optional[int]:
        """1-based sheet row index of the row whose key columns match, or None."""
        for idx, row in enumerate(sheet.get_all_values()[1:], start=2):
            if all(len(row) > col and row[col] == value for col, value in zip(key_columns, key)):
                return idx
        return None
    
    @_retry_api
    async def load_vocabulary(self, owner_id: str) -> Optional[list[str]]:
        try:
            for row in self._client.get_tags_sheet().get_all_values()[1:]:
                if row and row[0] == owner_id:
                    return json.loads(row[1]) if len(row) > 1 and row[1] else []
            return None
        except Exception as e:
            raise StorageError(f"Failed to load tags: {e}") from e
    
    async def save_vocabulary(self, owner_id: str, tags: list[str]) -> None:
        try:
            sheet = self._client.get_tags_sheet()
            idx = self._find_row(sheet, (owner_id,), (0,))
            if idx is None:
                sheet.append_row([owner_id, json.dumps(tags)], value_input_option="RAW")
            else:
                sheet.update_cell(idx, 2, json.dumps(tags))
        except Exception as e:
            raise StorageError(f"Failed to save tags: {e}") from e
    
    @_retry_api
    async def query_records(
        self,
        owner_id: str,
        predicate: Predicate,
        sort: SortSpec,
    ) -> list[Record]:
        try:
            records = self._owned_records(owner_id)
        except Exception as e:
            raise StorageError(f"Failed to query records: {e}") from e
        return sort_records((r for r in records if matches(r, predicate)), sort)
    
    @_retry_api
    async def list_records(self, owner_id: str, sort: SortSpec) -> list[Record]:
        try:
            return sort_records(self._owned_records(owner_id), sort)
        except Exception as e:
            raise StorageError(f"Failed to list records: {e}") from e
    
    async def get_record(self, owner_id: str, record_id: str) -> Optional[Record]:
        try:
            for record in self._owned_records(owner_id):
                if record.id == record_id:
                    return record
            return None
        except Exception as e:
            raise StorageError(f"Failed to get record: {e}") from e
    
    async def save_record(self, record: Record) -> Record:
        try:
            sheet = self._client.get_records_sheet()
            new_row = self._record_to_row(record)
            idx = self._find_row(sheet, (record.id, record.owner_id), (0, 1))
            if idx is None:
                sheet.append_row(new_row, value_input_option="RAW")
            else:
                for col_idx, value in enumerate(new_row, start=1):
                    sheet.update_cell(idx, col_idx, value)
            return record
        except Exception as e:
            raise StorageError(f"Failed to save record: {e}") from e
    
    async def delete_record(self, owner_id: str, record_id: str) -> bool:
        try:
            sheet = self._client.get_records_sheet()
            idx = self._find_row(sheet, (record_id, owner_id), (0, 1))
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except Exception as e:
            raise StorageError(f"Failed to delete record: {e}") from e
    
    def next_record_id(self) -> str:
        return new_record_id()


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.
    
    Audit events are append-only.
    """
    
    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()
    
    def _event_to_row(self, event: AuditEvent) -> list:
        return [
            str(event.event_id),
            event.timestamp.isoformat(),
            event.event_type.value,
            event.severity.value,
            event.owner_id or "",
            event.entity_type or "",
            event.entity_id or "",
            str(event.correlation_id) if event.correlation_id else "",
            event.description,
            json.dumps(event.details, default=str) if event.details else "",
            event.error_message or "",
        ]
    
    def _row_to_event(self, row: list) -> AuditEvent:
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default
        
        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            owner_id=safe_get(4) or None,
            entity_type=safe_get(5) or None,
            entity_id=safe_get(6) or None,
            correlation_id=UUID(safe_get(7)) if safe_get(7) else None,
            description=safe_get(8),
            details=json.loads(safe_get(9)) if safe_get(9) else {},
            error_message=safe_get(10) or None,
        )
    
    @_retry_api
    async def append_event(self, event: AuditEvent) -> bool:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(self._event_to_row(event), value_input_option="RAW")
        return True
    
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        try:
            all_rows = self._client.get_audit_sheet().get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}") from e
        
        events = []
        for row in all_rows:
            if len(row) > 7 and row[7] == str(correlation_id):
                try:
                    events.append(self._row_to_event(row))
                except ValueError:
                    continue
        
        events.sort(key=lambda e: e.timestamp)
        return events
