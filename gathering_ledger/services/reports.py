"""
Balance Report Generator

Builds a CSV of every member's figures per gathering, for gatherings
created within an optional date range.

Layout:
- One row per member, sorted like member_balances
- Gathering columns only on a gathering's first row
- A gathering without members still gets one row, with zero amounts
- "Date Closed" is the latest timestamp recorded in a closed gathering
  (its creation, expenses and payments); empty while open
"""

import csv
import io
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from gathering_ledger.ledger import member_balances
from gathering_ledger.models import AppData, Gathering
from gathering_ledger.services.errors import InvalidDateRangeError, NoDataInRangeError

REPORT_COLUMNS = [
    "Gathering ID",
    "Date Opened",
    "Date Closed",
    "Status",
    "Member ID",
    "Member Name",
    "Total Expenses",
    "Total Payments",
    "Balance",
]

_CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    # + 0 turns -0.00 into 0.00
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP) + 0


def _utc_date(moment: datetime) -> date:
    return moment.astimezone(timezone.utc).date()


def closed_at(gathering: Gathering) -> Optional[datetime]:
    """Latest timestamp in a closed gathering, or None while it is open."""
    if not gathering.is_closed:
        return None
    latest = gathering.created_at
    for member in gathering.members:
        for entry in [*member.expenses, *member.payments]:
            if entry.created_at > latest:
                latest = entry.created_at
    return latest


def build_balance_report(
    data: AppData,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> str:
    """
    Render the balance report as CSV text.

    Args:
        data: Store snapshot to report on
        start: Earliest creation date to include (inclusive, UTC)
        end: Latest creation date to include (inclusive, UTC)

    Raises:
        InvalidDateRangeError: If start is after end
        NoDataInRangeError: If no gathering was created in the range
    """
    if start and end and start > end:
        raise InvalidDateRangeError("Start date must be on or before end date.")

    gatherings = [
        g for g in data.gatherings
        if (start is None or _utc_date(g.created_at) >= start)
        and (end is None or _utc_date(g.created_at) <= end)
    ]
    if not gatherings:
        raise NoDataInRangeError("No gatherings found in the selected date range.")
    gatherings = sorted(reversed(gatherings), key=lambda g: g.created_at, reverse=True)

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(REPORT_COLUMNS)

    for gathering in gatherings:
        closed = closed_at(gathering)
        header = [
            gathering.id,
            gathering.created_at.isoformat(),
            closed.isoformat() if closed else "",
            gathering.status.value,
        ]

        if not gathering.members:
            zero = _money(Decimal("0"))
            writer.writerow([*header, "", "", zero, zero, zero])
            continue

        for index, balance in enumerate(member_balances(gathering, data.global_members)):
            writer.writerow([
                *(header if index == 0 else ["", "", "", ""]),
                balance.member_id,
                balance.name,
                _money(balance.total_expenses),
                _money(balance.total_payments),
                _money(balance.balance),
            ])

    return buffer.getvalue()


def report_filename(start: Optional[date] = None, end: Optional[date] = None) -> str:
    """Suggested download name, e.g. gathering-report-2024-01-01-to-all.csv."""
    start_text = start.isoformat() if start else "all"
    end_text = end.isoformat() if end else "all"
    return f"gathering-report-{start_text}-to-{end_text}.csv"
