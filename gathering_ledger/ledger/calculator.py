"""
Ledger Calculator

Pure functions over a Gathering or AppData snapshot. Nothing here reads
or writes the store.

EQUAL SPLIT: every member of a gathering owes the same share of its total
expenses, regardless of who incurred them. A member's balance is

    balance = own expenses + own payments - expense per member

Positive: they covered more than their share and are owed money.
Negative: they owe money. Within SETTLED_THRESHOLD of zero: settled.
"""

from decimal import Decimal
from typing import Iterable

from gathering_ledger.models import (
    AppData,
    BalanceStatus,
    Gathering,
    GatheringMember,
    GatheringTotals,
    GlobalMember,
    GlobalMemberBalance,
    MemberBalance,
)

SETTLED_THRESHOLD = Decimal("0.01")
UNKNOWN_MEMBER_NAME = "Unknown Member"

_ZERO = Decimal("0")


def name_sort_key(name: str) -> tuple[str, str]:
    """
    Sort key that orders names alphabetically, ignoring case first.

    Names equal except for case put lowercase first, so "alice" sorts
    before "Alice" and both before "bea" and "Zed".
    """
    return name.casefold(), name.swapcase()


def balance_status(balance: Decimal) -> BalanceStatus:
    """Classify a balance as settled, owed money, or owing money."""
    if abs(balance) < SETTLED_THRESHOLD:
        return BalanceStatus.SETTLED
    if balance > 0:
        return BalanceStatus.IS_OWED_MONEY
    return BalanceStatus.OWES_MONEY


def gathering_totals(gathering: Gathering) -> GatheringTotals:
    """Total expenses, total payments and the equal share per member."""
    total_expenses = sum((m.total_expenses for m in gathering.members), _ZERO)
    total_payments = sum((m.total_payments for m in gathering.members), _ZERO)
    member_count = len(gathering.members)
    expense_per_member = total_expenses / member_count if member_count > 0 else _ZERO

    return GatheringTotals(
        total_expenses=total_expenses,
        total_payments=total_payments,
        expense_per_member=expense_per_member,
    )


def _member_balance(member: GatheringMember, expense_per_member: Decimal) -> Decimal:
    return member.total_expenses + member.total_payments - expense_per_member


def member_balances(
    gathering: Gathering,
    global_members: Iterable[GlobalMember] = (),
) -> list[MemberBalance]:
    """
    One MemberBalance per gathering member, sorted by display name.

    Names come from global_members; a dangling memberId resolves to
    UNKNOWN_MEMBER_NAME rather than failing.
    """
    names = {gm.id: gm.name for gm in global_members}
    expense_per_member = gathering_totals(gathering).expense_per_member

    balances = []
    for member in gathering.members:
        balance = _member_balance(member, expense_per_member)
        balances.append(MemberBalance(
            member_id=member.member_id,
            name=names.get(member.member_id, UNKNOWN_MEMBER_NAME),
            total_expenses=member.total_expenses,
            total_payments=member.total_payments,
            balance=balance,
            status=balance_status(balance),
        ))

    # sorted() is stable: equal names keep membership order
    return sorted(balances, key=lambda b: name_sort_key(b.name))


def global_member_balances(data: AppData) -> list[GlobalMemberBalance]:
    """
    Per global member, figures summed over every gathering they joined.

    Open and closed gatherings both count. Members who joined nothing
    get all-zero totals. Order follows the store.
    """
    shares = [
        (gathering, gathering_totals(gathering).expense_per_member)
        for gathering in data.gatherings
    ]

    results = []
    for global_member in data.global_members:
        total_expenses = _ZERO
        total_payments = _ZERO
        net_balance = _ZERO

        for gathering, share in shares:
            member = gathering.find_member(global_member.id)
            if member is None:
                continue
            total_expenses += member.total_expenses
            total_payments += member.total_payments
            net_balance += _member_balance(member, share)

        results.append(GlobalMemberBalance(
            id=global_member.id,
            name=global_member.name,
            total_expenses=total_expenses,
            total_payments=total_payments,
            net_balance=net_balance,
        ))

    return results
