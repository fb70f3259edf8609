"""Shared fixtures: an in-memory store with one user and a handful of records."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ledger.models.record import Record, RecordType
from ledger.services.storage import InMemoryAuditStorage, InMemoryRecordStorage
from ledger.audit import AuditLogger

OWNER = "user-1"
OTHER_OWNER = "user-2"
VOCABULARY = ["food", "Travel", "gift", "oldTag"]


def rid(n: int) -> str:
    return f"{n:024x}"


def make_record(
    n: int,
    amount: str = "10",
    type: RecordType = RecordType.DEBIT,
    tags: tuple = (),
    description: str = "",
    when: datetime = datetime(2021, 1, 1),
    owner: str = OWNER,
) -> Record:
    return Record(
        id=rid(n),
        owner_id=owner,
        date=when,
        amount=Decimal(amount),
        type=type,
        tags=tags,
        description=description,
    )


@pytest.fixture
def records() -> list[Record]:
    return [
        make_record(1, "5", tags=("food",), description="Lunch at the office",
                    when=datetime(2021, 1, 1)),
        make_record(2, "150", RecordType.CREDIT, description="Salary bonus",
                    when=datetime(2021, 1, 10)),
        make_record(3, "40", tags=("food", "Travel"), description="Dinner on the train",
                    when=datetime(2021, 2, 1)),
        make_record(4, "200", tags=("gift",), description="Birthday lunch gift",
                    when=datetime(2021, 3, 1)),
        make_record(5, "12", RecordType.CREDIT, tags=("Travel",), description="Refund",
                    when=datetime(2021, 3, 15)),
    ]


@pytest.fixture
def storage(records) -> InMemoryRecordStorage:
    store = InMemoryRecordStorage()
    store.add_owner(OWNER, VOCABULARY)
    store.add_owner(OTHER_OWNER, ["food"])
    store.add_records(records)
    store.add_records([
        make_record(99, "5", tags=("food",), description="lunch", owner=OTHER_OWNER),
    ])
    return store


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def fixed_now():
    """Clock pinned to 2021-06-15 12:00 UTC."""
    return lambda: datetime(2021, 6, 15, 12, 0, tzinfo=timezone.utc)
