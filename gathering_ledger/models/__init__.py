"""
Data Models Package

This package contains all Pydantic models used by the Gathering Ledger.
Everything read from or written to the store must conform to these schemas.
"""

from gathering_ledger.models.gathering import (
    AppData,
    Expense,
    Gathering,
    GatheringMember,
    GatheringStatus,
    GlobalMember,
    Payment,
    PaymentSource,
    utc_now,
)
from gathering_ledger.models.balance import (
    BalanceStatus,
    GatheringTotals,
    GlobalMemberBalance,
    MemberBalance,
)

__all__ = [
    # Store models
    "AppData",
    "Expense",
    "Gathering",
    "GatheringMember",
    "GatheringStatus",
    "GlobalMember",
    "Payment",
    "PaymentSource",
    "utc_now",
    # Derived models
    "BalanceStatus",
    "GatheringTotals",
    "GlobalMemberBalance",
    "MemberBalance",
]
