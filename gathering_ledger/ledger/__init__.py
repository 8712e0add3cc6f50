"""Ledger calculation package."""

from gathering_ledger.ledger.calculator import (
    SETTLED_THRESHOLD,
    UNKNOWN_MEMBER_NAME,
    balance_status,
    name_sort_key,
    gathering_totals,
    global_member_balances,
    member_balances,
)

__all__ = [
    "SETTLED_THRESHOLD",
    "UNKNOWN_MEMBER_NAME",
    "balance_status",
    "name_sort_key",
    "gathering_totals",
    "global_member_balances",
    "member_balances",
]
