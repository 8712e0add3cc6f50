"""
Derived Balance Models

These records are computed from a gathering snapshot by the ledger
calculator. They are never persisted.
"""

from decimal import Decimal
from enum import Enum

from pydantic import Field

from gathering_ledger.models.gathering import WireModel


class BalanceStatus(str, Enum):
    """Where a member stands within a gathering."""
    SETTLED = "settled"
    IS_OWED_MONEY = "isOwedMoney"  # covered more than their share
    OWES_MONEY = "owesMoney"


class GatheringTotals(WireModel):
    """Aggregate figures for one gathering."""

    total_expenses: Decimal = Decimal("0")
    total_payments: Decimal = Decimal("0")
    expense_per_member: Decimal = Field(
        default=Decimal("0"),
        description="Equal share of total expenses; 0 with no members"
    )


class MemberBalance(WireModel):
    """A member's net position within one gathering."""

    member_id: str
    name: str
    total_expenses: Decimal
    total_payments: Decimal
    balance: Decimal = Field(
        ...,
        description="Positive: is owed money. Negative: owes money."
    )
    status: BalanceStatus


class GlobalMemberBalance(WireModel):
    """A global member's figures summed over every gathering they joined."""

    id: str
    name: str
    total_expenses: Decimal = Decimal("0")
    total_payments: Decimal = Decimal("0")
    net_balance: Decimal = Decimal("0")
