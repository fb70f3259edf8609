"""
Core Data Models for Ledger

These models define the schemas for records, record input and the filter
criteria accepted by the filtering engine.

DESIGN DECISION: Wire names (idStart, filterCriteria, _id, userId ...) are
part of the external contract, so every model accepts them as aliases while
the Python side uses snake_case names.

All models are frozen. Changes are made with model_copy(update=...) and
then persisted explicitly; nothing is mutated in place.
"""

from datetime import datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class RecordType(str, Enum):
    """Direction of money movement for a record."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class TypeCriteria(str, Enum):
    """
    Record type constraint in a filter.
    
    ANY means "no constraint" and contributes no predicate.
    """
    ANY = "ANY"
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class FilterCriteria(str, Enum):
    """
    Combination mode.
    
    Used both for tags (tagsType) and for the top-level combination of
    per-field predicates (filterCriteria).
    """
    ALL = "ALL"
    ANY = "ANY"


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a date or datetime to an aware UTC datetime (naive means UTC)."""
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =============================================================================
# ERRORS REPORTED TO THE CALLER
# =============================================================================

class FieldError(BaseModel):
    """
    A single field-level error.
    
    Serialized with the literal shape {message, field?}.
    """
    model_config = ConfigDict(frozen=True)
    
    message: str
    field: Optional[str] = None
    
    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)


# =============================================================================
# RECORDS
# =============================================================================

class Record(BaseModel):
    """
    A dated monetary record owned by exactly one user.
    
    Every tag must belong to the owner's vocabulary at the time of write.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
    
    id: str = Field(
        ...,
        alias="_id",
        min_length=1,
        description="Record identifier, ordered by creation time"
    )
    owner_id: str = Field(
        ...,
        alias="userId",
        min_length=1,
        description="Identifier of the owning user"
    )
    date: datetime
    amount: Decimal = Field(..., gt=0)
    type: RecordType
    tags: tuple[str, ...] = ()
    description: str = ""
    
    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_utc(v)
    
    def to_wire(self) -> dict:
        """Convert to the wire representation consumed by the transport layer."""
        return {
            "_id": self.id,
            "userId": self.owner_id,
            "date": self.date.isoformat(),
            "amount": float(self.amount),
            "type": self.type.value,
            "tags": list(self.tags),
            "description": self.description,
        }


class RecordInput(BaseModel):
    """
    Record data as submitted for create/edit.
    
    Only structural parsing happens here; business rules (future dates,
    non-positive amounts) are reported by validate_record_input so that
    every problem is collected at once.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    
    id: Optional[str] = Field(default=None, alias="_id")
    date: datetime
    amount: Decimal
    type: str
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    
    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_utc(v)


# =============================================================================
# FILTER CRITERIA
# =============================================================================

class RecordFilter(BaseModel):
    """
    Filter request for a user's records.
    
    Every field is optional on its own; CriteriaResolver rejects a request
    that ends up with no usable criterion at all.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    
    id_start: Optional[str] = Field(default=None, alias="idStart")
    id_end: Optional[str] = Field(default=None, alias="idEnd")
    date_start: Optional[datetime] = Field(default=None, alias="dateStart")
    date_end: Optional[datetime] = Field(default=None, alias="dateEnd")
    amount_start: Optional[Decimal] = Field(default=None, alias="amountStart")
    amount_end: Optional[Decimal] = Field(default=None, alias="amountEnd")
    type: TypeCriteria = TypeCriteria.ANY
    tags_type: FilterCriteria = Field(default=FilterCriteria.ALL, alias="tagsType")
    tags: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    filter_criteria: FilterCriteria = Field(
        default=FilterCriteria.ALL,
        validation_alias=AliasChoices("filterCriteria", "criteria", "filter_criteria"),
        serialization_alias="filterCriteria",
    )
    
    @field_validator('id_start', 'id_end', mode='before')
    @classmethod
    def stringify_id(cls, v):
        """Identifiers are compared by their canonical string form."""
        if v is None or v == "":
            return None
        return str(v)
    
    @field_validator('date_start', 'date_end')
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v)
    
    @field_validator('tags', mode='before')
    @classmethod
    def none_tags_to_empty(cls, v):
        return [] if v is None else v
    
    @property
    def search_text(self) -> str:
        """Description fragment with surrounding whitespace removed ("" if absent)."""
        return (self.description or "").strip()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
