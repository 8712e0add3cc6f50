"""
Core Data Models for Gathering Ledger

These models define the strict schemas for the persisted store.
They are designed to:
1. Enforce field-level constraints (positive expenses, finite amounts)
2. Serialize to the camelCase wire layout used by the store and the codec
3. Accept both wire names and Python attribute names on input
4. Keep every timestamp timezone-aware (naive input is read as UTC)

DESIGN DECISION: Amounts are Decimal, never float. Repeated additions of
currency amounts must not drift, and the "settled" threshold of 0.01
assumes accumulated error stays well below that.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so every stored timestamp is comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WireModel(BaseModel):
    """Base for models stored under camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict:
        """Dump to JSON-compatible primitives using wire names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS
# =============================================================================

class GatheringStatus(str, Enum):
    """
    Gathering lifecycle status.

    Transitions OPEN -> CLOSED only. CLOSED is terminal.
    """
    OPEN = "open"
    CLOSED = "closed"


class PaymentSource(str, Enum):
    """
    Who created a payment.

    Settlement payments are generated when a gathering is closed. They are
    otherwise identical to user payments and count the same in balances.
    """
    USER = "user"
    SETTLEMENT = "settlement"


# =============================================================================
# LEDGER ENTRIES
# =============================================================================

class Expense(WireModel):
    """Money a member spent on behalf of the group."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent, strictly positive"
    )
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator('amount')
    @classmethod
    def validate_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @field_validator('created_at')
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class Payment(WireModel):
    """
    A reimbursement recorded against a member.

    Any sign is allowed: negative payments are corrections, money received,
    or the debit side of a settlement.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    amount: Decimal
    created_at: datetime = Field(default_factory=utc_now)
    source: PaymentSource = Field(
        default=PaymentSource.USER,
        description="Whether a user or the close-time settlement created it"
    )

    @field_validator('amount')
    @classmethod
    def validate_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @field_validator('created_at')
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)


# =============================================================================
# MEMBERS AND GATHERINGS
# =============================================================================

class GlobalMember(WireModel):
    """A person known to the whole store, reusable across gatherings."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str


class GatheringMember(WireModel):
    """One global member's participation in one gathering."""

    member_id: str = Field(
        ...,
        min_length=1,
        description="Foreign key to GlobalMember.id"
    )
    expenses: list[Expense] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)

    @property
    def total_expenses(self) -> Decimal:
        return sum((e.amount for e in self.expenses), Decimal("0"))

    @property
    def total_payments(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal("0"))


class Gathering(WireModel):
    """
    A bounded expense-sharing event.

    The id is chosen by the user and must be unique in the store.
    """

    id: str = Field(..., min_length=1)
    description: str = ""
    status: GatheringStatus = Field(default=GatheringStatus.OPEN)
    created_at: datetime = Field(default_factory=utc_now)
    members: list[GatheringMember] = Field(default_factory=list)

    @field_validator('created_at')
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return as_utc(v)

    @property
    def is_closed(self) -> bool:
        return self.status == GatheringStatus.CLOSED

    def find_member(self, member_id: str) -> Optional[GatheringMember]:
        """Return this gathering's entry for member_id, if any."""
        for member in self.members:
            if member.member_id == member_id:
                return member
        return None


class AppData(WireModel):
    """
    The store root.

    Missing top-level keys default to empty lists so older or partial
    stores still load.
    """

    gatherings: list[Gathering] = Field(default_factory=list)
    global_members: list[GlobalMember] = Field(default_factory=list)

    def find_gathering(self, gathering_id: str) -> Optional[Gathering]:
        for gathering in self.gatherings:
            if gathering.id == gathering_id:
                return gathering
        return None

    def find_global_member(self, member_id: str) -> Optional[GlobalMember]:
        for member in self.global_members:
            if member.id == member_id:
                return member
        return None
