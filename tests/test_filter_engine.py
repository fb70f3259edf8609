"""
Tests for RecordFilterEngine against the in-memory store.

Fixture records (owner user-1), newest id last:
    1  5    DEBIT   food          "Lunch at the office"
    2  150  CREDIT  -             "Salary bonus"
    3  40   DEBIT   food, Travel  "Dinner on the train"
    4  200  DEBIT   gift          "Birthday lunch gift"
    5  12   CREDIT  Travel        "Refund"
"""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from ledger.errors import (
    NoCriteria,
    NoValidTags,
    StoreFailure,
    Unauthorized,
    ValidationFailed,
)
from ledger.filtering import CriteriaResolver, CriteriaValidator
from ledger.models.audit import AuditEventType
from ledger.models.record import RecordFilter
from ledger.services.filtering import RecordFilterEngine

from tests.conftest import OTHER_OWNER, OWNER, rid


def ids(records):
    return [int(r.id, 16) for r in records]


@pytest.fixture
def engine(storage, audit_logger, fixed_now) -> RecordFilterEngine:
    resolver = CriteriaResolver(validator=CriteriaValidator(now=fixed_now))
    return RecordFilterEngine(storage, resolver=resolver, audit_logger=audit_logger)


def criteria(**fields) -> RecordFilter:
    return RecordFilter.model_validate(fields)


class TestAnyMode:
    
    @pytest.mark.asyncio
    async def test_primary_then_text_results(self, engine):
        result = await engine.filter_records(
            OWNER, criteria(amountStart=100, description="lunch", filterCriteria="ANY")
        )
        # amount >= 100 gives [4, 2]; "lunch" gives [4, 1]
        assert ids(result) == [4, 2, 1]
    
    @pytest.mark.asyncio
    async def test_two_store_executions(self, engine, storage):
        storage.query_records = AsyncMock(wraps=storage.query_records)
        await engine.filter_records(
            OWNER, criteria(amountStart=100, description="lunch", filterCriteria="ANY")
        )
        assert storage.query_records.await_count == 2
    
    @pytest.mark.asyncio
    async def test_disjunction_of_fields(self, engine):
        result = await engine.filter_records(
            OWNER, criteria(type="CREDIT", tags=["gift"], filterCriteria="ANY")
        )
        assert ids(result) == [5, 4, 2]
    
    @pytest.mark.asyncio
    async def test_text_only(self, engine):
        result = await engine.filter_records(
            OWNER, criteria(description="LUNCH", filterCriteria="ANY")
        )
        assert ids(result) == [4, 1]
    
    @pytest.mark.asyncio
    async def test_any_tags(self, engine):
        result = await engine.filter_records(
            OWNER, criteria(tags=["FOOD", "travel"], tagsType="ANY")
        )
        assert ids(result) == [5, 3, 1]


class TestAllMode:
    
    @pytest.mark.asyncio
    async def test_conjunction_with_text(self, engine):
        result = await engine.filter_records(
            OWNER, criteria(amountStart=100, description="lunch")
        )
        assert ids(result) == [4]
    
    @pytest.mark.asyncio
    async def test_all_is_subset_of_any(self, engine):
        fields = {"amountEnd": 50, "type": "DEBIT", "description": "dinner"}
        all_ids = set(ids(await engine.filter_records(OWNER, criteria(**fields))))
        any_ids = set(ids(await engine.filter_records(
            OWNER, criteria(**fields, filterCriteria="ANY")
        )))
        assert all_ids == {3}
        assert all_ids <= any_ids
    
    @pytest.mark.asyncio
    async def test_single_execution(self, engine, storage):
        storage.query_records = AsyncMock(wraps=storage.query_records)
        await engine.filter_records(OWNER, criteria(amountStart=100, description="lunch"))
        assert storage.query_records.await_count == 1
    
    @pytest.mark.asyncio
    async def test_all_tags(self, engine):
        result = await engine.filter_records(OWNER, criteria(tags=["food", "Travel"]))
        assert ids(result) == [3]
    
    @pytest.mark.asyncio
    async def test_date_window(self, engine):
        result = await engine.filter_records(
            OWNER, criteria(dateStart=datetime(2021, 1, 5), dateEnd=datetime(2021, 2, 1))
        )
        assert ids(result) == [3, 2]
    
    @pytest.mark.asyncio
    async def test_equal_id_bounds(self, engine):
        result = await engine.filter_records(OWNER, criteria(idStart=rid(3), idEnd=rid(3)))
        assert ids(result) == [3]
    
    @pytest.mark.asyncio
    async def test_zero_amount_start_is_a_bound(self, engine):
        result = await engine.filter_records(OWNER, criteria(amountStart=0))
        assert ids(result) == [5, 4, 3, 2, 1]
    
    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, engine):
        assert await engine.filter_records(OWNER, criteria(description="yacht")) == []


class TestIsolation:
    
    @pytest.mark.asyncio
    async def test_other_owner_records_excluded(self, engine):
        result = await engine.filter_records(OWNER, criteria(description="lunch"))
        assert all(r.owner_id == OWNER for r in result)
        assert rid(99) not in [r.id for r in result]
    
    @pytest.mark.asyncio
    async def test_other_owner_sees_only_own(self, engine):
        result = await engine.filter_records(OTHER_OWNER, criteria(tags=["food"]))
        assert [r.id for r in result] == [rid(99)]
    
    @pytest.mark.asyncio
    async def test_tags_resolved_against_own_vocabulary(self, engine):
        """user-2 has no 'gift' tag, so nothing resolves."""
        with pytest.raises(NoValidTags):
            await engine.filter_records(OTHER_OWNER, criteria(tags=["gift"]))


class TestRejections:
    
    @pytest.mark.asyncio
    async def test_no_criteria(self, engine, audit_storage):
        with pytest.raises(NoCriteria):
            await engine.filter_records(OWNER, criteria(description="  ", filterCriteria="ANY"))
        assert audit_storage.events[-1].event_type == AuditEventType.FILTER_REJECTED
        assert audit_storage.events[-1].details["reason"] == "NoCriteria"
    
    @pytest.mark.asyncio
    async def test_short_tags(self, engine):
        with pytest.raises(NoValidTags) as exc:
            await engine.filter_records(OWNER, criteria(tags=["xx"]))
        assert exc.value.to_envelope() == {
            "message": "Invalid Input",
            "status": 422,
            "data": [{"message": "No valid tags given", "field": "tags"}],
        }
    
    @pytest.mark.asyncio
    async def test_validation_before_any_io(self, engine, storage):
        storage.load_vocabulary = AsyncMock(wraps=storage.load_vocabulary)
        storage.query_records = AsyncMock(wraps=storage.query_records)
        
        with pytest.raises(ValidationFailed) as exc:
            await engine.filter_records(
                OWNER, criteria(idStart="234", idEnd="123", tags=["food"])
            )
        
        assert [e.message for e in exc.value.errors] == [
            "idEnd cannot be smaller than idStart"
        ]
        storage.load_vocabulary.assert_not_awaited()
        storage.query_records.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_vocabulary_not_loaded_without_tags(self, engine, storage):
        storage.load_vocabulary = AsyncMock(wraps=storage.load_vocabulary)
        await engine.filter_records(OWNER, criteria(amountStart=1))
        storage.load_vocabulary.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_unknown_owner_with_tags(self, engine, audit_storage):
        with pytest.raises(Unauthorized) as exc:
            await engine.filter_records("nobody", criteria(tags=["food"]))
        assert exc.value.status == 401
        assert audit_storage.events == []


class TestStoreFailures:
    
    @pytest.mark.asyncio
    async def test_first_failure_aborts(self, engine, storage, audit_storage):
        storage.query_records = AsyncMock(side_effect=RuntimeError("connection reset"))
        
        with pytest.raises(StoreFailure) as exc:
            await engine.filter_records(
                OWNER, criteria(amountStart=100, description="lunch", filterCriteria="ANY")
            )
        
        assert exc.value.status == 500
        assert exc.value.message == "Failed to filter records"
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert storage.query_records.await_count == 1
        
        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.STORAGE_ERROR
        assert event.error_message == "connection reset"
        assert event.details["operation"] == "query_records"
    
    @pytest.mark.asyncio
    async def test_second_failure_discards_first_result(self, engine, storage):
        real_query = storage.query_records
        calls = []
        
        async def flaky(owner_id, predicate, sort):
            calls.append(predicate)
            if len(calls) == 2:
                raise RuntimeError("timeout")
            return await real_query(owner_id, predicate, sort)
        
        storage.query_records = flaky
        with pytest.raises(StoreFailure):
            await engine.filter_records(
                OWNER, criteria(amountStart=100, description="lunch", filterCriteria="ANY")
            )
        assert len(calls) == 2
    
    @pytest.mark.asyncio
    async def test_vocabulary_failure(self, engine, storage):
        storage.load_vocabulary = AsyncMock(side_effect=RuntimeError("down"))
        with pytest.raises(StoreFailure):
            await engine.filter_records(OWNER, criteria(tags=["food"]))


@pytest.mark.asyncio
async def test_executed_filter_is_audited(engine, audit_storage):
    await engine.filter_records(
        OWNER, criteria(amountStart=100, description="lunch", filterCriteria="ANY")
    )
    event = audit_storage.events[-1]
    assert event.event_type == AuditEventType.FILTER_EXECUTED
    assert event.owner_id == OWNER
    assert event.details == {"filter_criteria": "ANY", "executions": 2, "result_count": 3}


@pytest.mark.asyncio
async def test_correlation_id_is_propagated(engine, audit_storage):
    from ledger.audit import create_correlation_id
    
    correlation_id = create_correlation_id()
    await engine.filter_records(OWNER, criteria(type="DEBIT"), correlation_id=correlation_id)
    related = await audit_storage.get_events_by_correlation_id(correlation_id)
    assert [e.event_type for e in related] == [AuditEventType.FILTER_EXECUTED]
