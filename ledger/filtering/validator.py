"""
Filter Criteria Validation

DESIGN DECISION: Validation never throws and never short-circuits. Every
violation found in a request is returned together so the caller can report
all of them in one response.

Checks on a filter request:
- idEnd must not sort before idStart (string comparison)
- dateStart / dateEnd must not be later than the current instant
- dateEnd must not precede dateStart (only when both dates passed the check above)
- amountStart must not be negative, amountEnd must be positive
- amountEnd must not be smaller than amountStart (see _amount_order_checked)
"""

from datetime import datetime
from typing import Callable, Optional

from ledger.models.record import (
    FieldError,
    RecordFilter,
    RecordInput,
    RecordType,
    now_utc,
)


class CriteriaValidator:
    """
    Structural and ordering validation of a RecordFilter.
    
    The clock returns an aware UTC datetime and is injectable so "now"
    is deterministic in tests.
    """
    
    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or now_utc
    
    def _validate_ids(self, criteria: RecordFilter) -> list[FieldError]:
        if (
            criteria.id_start is not None
            and criteria.id_end is not None
            and criteria.id_end < criteria.id_start
        ):
            return [FieldError(
                message="idEnd cannot be smaller than idStart",
                field="idEnd",
            )]
        return []
    
    def _validate_dates(self, criteria: RecordFilter) -> list[FieldError]:
        errors = []
        now = self._now()
        
        start_ok = True
        if criteria.date_start is not None and criteria.date_start > now:
            start_ok = False
            errors.append(FieldError(
                message="dateStart must be today or before today",
                field="dateStart",
            ))
        
        end_ok = True
        if criteria.date_end is not None and criteria.date_end > now:
            end_ok = False
            errors.append(FieldError(
                message="dateEnd must be today or before today",
                field="dateEnd",
            ))
        
        if (
            start_ok
            and end_ok
            and criteria.date_start is not None
            and criteria.date_end is not None
            and criteria.date_end < criteria.date_start
        ):
            errors.append(FieldError(
                message="dateEnd cannot be before dateStart",
                field="dateEnd",
            ))
        
        return errors
    
    @staticmethod
    def _amount_order_checked(start_ok: bool, end_ok: bool) -> bool:
        # Order is compared only when both bounds passed, or both failed,
        # their sign check.
        return start_ok == end_ok
    
    def _validate_amounts(self, criteria: RecordFilter) -> list[FieldError]:
        errors = []
        start, end = criteria.amount_start, criteria.amount_end
        
        start_ok = True
        if start is not None and start < 0:
            start_ok = False
            errors.append(FieldError(
                message="amountStart must be greater than 0",
                field="amountStart",
            ))
        
        end_ok = True
        if end is not None and end <= 0:
            end_ok = False
            errors.append(FieldError(
                message="amountEnd must be greater than 0",
                field="amountEnd",
            ))
        
        if (
            start is not None
            and end is not None
            and self._amount_order_checked(start_ok, end_ok)
            and end < start
        ):
            errors.append(FieldError(
                message="amountEnd cannot be smaller than amountStart",
                field="amountEnd",
            ))
        
        return errors
    
    def validate(self, criteria: RecordFilter) -> list[FieldError]:
        """Return every field error found in the filter request."""
        errors = []
        errors.extend(self._validate_ids(criteria))
        errors.extend(self._validate_dates(criteria))
        errors.extend(self._validate_amounts(criteria))
        return errors


def validate_record_input(
    record: RecordInput,
    now: Optional[Callable[[], datetime]] = None,
) -> list[FieldError]:
    """Field errors for a record about to be created or edited."""
    errors = []
    now = now or now_utc
    
    if record.date > now():
        errors.append(FieldError(
            message="date must be at today or before today",
            field="date",
        ))
    if record.amount <= 0:
        errors.append(FieldError(
            message="amount must be greater than 0",
            field="amount",
        ))
    if record.type not in (RecordType.DEBIT.value, RecordType.CREDIT.value):
        errors.append(FieldError(
            message=f"type must be either '{RecordType.DEBIT.value}' or '{RecordType.CREDIT.value}'",
            field="type",
        ))
    
    return errors
