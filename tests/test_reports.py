"""Tests for the CSV balance report."""

import csv
import io

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from gathering_ledger.models import (
    AppData,
    Expense,
    Gathering,
    GatheringMember,
    GatheringStatus,
    GlobalMember,
    Payment,
)
from gathering_ledger.services import (
    InvalidDateRangeError,
    NoDataInRangeError,
    build_balance_report,
    report_filename,
)
from gathering_ledger.services.reports import REPORT_COLUMNS, closed_at


def _at(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 6, day, hour, tzinfo=timezone.utc)


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


@pytest.fixture
def data():
    return AppData(
        global_members=[
            GlobalMember(id="a", name="Alice"),
            GlobalMember(id="b", name="Bob"),
        ],
        gatherings=[
            Gathering(
                id="picnic",
                created_at=_at(1),
                members=[
                    GatheringMember(
                        member_id="b",
                        expenses=[Expense(id="e1", amount=Decimal("30"), created_at=_at(1))],
                    ),
                    GatheringMember(member_id="a"),
                ],
            ),
            Gathering(
                id="dinner",
                status=GatheringStatus.CLOSED,
                created_at=_at(5),
                members=[
                    GatheringMember(
                        member_id="a",
                        payments=[Payment(id="p1", amount=Decimal("-5"), created_at=_at(7, 9))],
                    ),
                    GatheringMember(
                        member_id="b",
                        payments=[Payment(id="p2", amount=Decimal("5"), created_at=_at(6))],
                    ),
                ],
            ),
            Gathering(id="empty", created_at=_at(10)),
        ],
    )


class TestBalanceReport:
    """Tests for build_balance_report."""

    def test_header(self, data):
        """Test the first row names every column."""
        assert _rows(build_balance_report(data))[0] == REPORT_COLUMNS

    def test_rows_newest_first(self, data):
        """Test gatherings appear newest first, one row per member."""
        rows = _rows(build_balance_report(data))[1:]
        assert [r[0] for r in rows] == ["empty", "dinner", "", "picnic", ""]

    def test_member_rows(self, data):
        """Test member figures and blank gathering columns after the first row."""
        rows = _rows(build_balance_report(data))
        picnic = rows.index(next(r for r in rows if r[0] == "picnic"))
        first, second = rows[picnic], rows[picnic + 1]

        assert first[3] == "open"
        assert first[2] == ""
        assert first[4:] == ["a", "Alice", "0.00", "0.00", "-15.00"]
        assert second[:4] == ["", "", "", ""]
        assert second[4:] == ["b", "Bob", "30.00", "0.00", "15.00"]

    def test_closed_date_is_latest_entry(self, data):
        """Test a closed gathering reports its latest timestamp."""
        dinner = next(r for r in _rows(build_balance_report(data)) if r[0] == "dinner")
        assert dinner[2] == _at(7, 9).isoformat()
        assert closed_at(data.gatherings[0]) is None

    def test_naive_timestamps_mix_with_aware(self):
        """Test stores holding naive timestamps still report and sort."""
        data = AppData.model_validate({
            "gatherings": [
                {
                    "id": "old",
                    "status": "closed",
                    "createdAt": "2024-06-01T10:00:00",
                    "members": [{
                        "memberId": "m1",
                        "expenses": [],
                        "payments": [{"id": "p1", "amount": 1, "createdAt": _at(2).isoformat()}],
                    }],
                },
                {"id": "new", "createdAt": _at(3).isoformat()},
            ],
        })
        rows = _rows(build_balance_report(data))
        assert [r[0] for r in rows[1:] if r[0]] == ["new", "old"]
        assert closed_at(data.gatherings[0]) == _at(2)

    def test_empty_gathering_row(self, data):
        """Test a gathering without members still gets a zero row."""
        empty = next(r for r in _rows(build_balance_report(data)) if r[0] == "empty")
        assert empty[4:] == ["", "", "0.00", "0.00", "0.00"]

    def test_date_range_is_inclusive(self, data):
        """Test start and end bound creation dates inclusively."""
        rows = _rows(build_balance_report(data, start=date(2024, 6, 1), end=date(2024, 6, 5)))
        assert {r[0] for r in rows[1:]} - {""} == {"picnic", "dinner"}

    def test_open_ended_range(self, data):
        """Test a range with only a start date."""
        rows = _rows(build_balance_report(data, start=date(2024, 6, 6)))
        assert [r[0] for r in rows[1:]] == ["empty"]

    def test_invalid_range(self, data):
        """Test start after end is rejected."""
        with pytest.raises(InvalidDateRangeError):
            build_balance_report(data, start=date(2024, 6, 5), end=date(2024, 6, 1))

    def test_no_data_in_range(self, data):
        """Test an empty selection is reported as an error."""
        with pytest.raises(NoDataInRangeError):
            build_balance_report(data, start=date(2025, 1, 1))


class TestReportFilename:
    """Tests for report_filename."""

    def test_filename(self):
        """Test bounds appear in the name, or 'all'."""
        assert report_filename() == "gathering-report-all-to-all.csv"
        assert (
            report_filename(date(2024, 1, 1), None)
            == "gathering-report-2024-01-01-to-all.csv"
        )
