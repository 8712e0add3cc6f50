"""Tests for the import/export codec and the repository transport surface."""

import base64
import json

import pytest
from decimal import Decimal

from gathering_ledger.models import AppData
from gathering_ledger.services import (
    GatheringRepository,
    InvalidFormatError,
    MemoryStore,
    decode_token,
    encode_store,
)


def _token(value) -> str:
    return base64.b64encode(json.dumps(value).encode("utf-8")).decode("ascii")


class TestRoundTrip:
    """Tests that export then import reproduces the store."""

    def test_round_trip_full_store(self, repo, trio):
        """Test a store with open and closed gatherings survives transport."""
        alice, bob, carol = trio
        repo.record_payment("g1", bob.id, "12.345")
        repo.create_gathering("g2", "Closed one")
        repo.add_member_to_gathering("g2", alice.id)
        repo.close_gathering("g1")

        original = repo.store.load()
        assert decode_token(encode_store(original)) == original

    def test_round_trip_unicode(self):
        """Test names and descriptions outside ASCII survive transport."""
        data = AppData.model_validate({
            "gatherings": [{
                "id": "fête-🎉",
                "description": "Überraschung — 東京",
                "status": "open",
                "createdAt": "2024-05-01T08:30:00Z",
                "members": [],
            }],
            "globalMembers": [{"id": "global-1", "name": "Zoë"}],
        })
        token = encode_store(data)
        token.encode("ascii")
        assert decode_token(token) == data

    def test_round_trip_empty_store(self):
        """Test the empty store round-trips."""
        assert decode_token(encode_store(AppData())) == AppData()

    def test_export_import_through_repository(self, repo, trio):
        """Test import overwrites a different store completely."""
        token = repo.export_data()

        other = GatheringRepository(MemoryStore())
        other.create_gathering("stale", "Will be replaced")
        imported = other.import_data(token)

        assert other.get_gathering("stale") is None
        assert other.store.load() == repo.store.load()
        assert imported == repo.store.load()

    def test_amounts_keep_exact_decimals(self):
        """Test amounts are carried as exact decimals."""
        token = _token({
            "gatherings": [{
                "id": "g1",
                "description": "",
                "status": "open",
                "createdAt": "2024-05-01T08:30:00Z",
                "members": [{
                    "memberId": "m1",
                    "expenses": [{"id": "e1", "amount": "0.10", "createdAt": "2024-05-01T08:30:00Z"}],
                    "payments": [{"id": "p1", "amount": -3, "createdAt": "2024-05-01T08:30:00Z"}],
                }],
            }],
            "globalMembers": [],
        })
        member = decode_token(token).gatherings[0].members[0]
        assert member.expenses[0].amount == Decimal("0.10")
        assert member.payments[0].amount == Decimal("-3")

    def test_amounts_exported_as_decimal_strings(self):
        """Test exported amounts are strings holding the exact value."""
        data = AppData.model_validate({
            "gatherings": [{
                "id": "g1",
                "members": [{
                    "memberId": "m1",
                    "expenses": [{"id": "e1", "amount": "12.50"}],
                    "payments": [{"id": "p1", "amount": -3}],
                }],
            }],
        })
        wire = json.loads(base64.b64decode(encode_store(data)))
        member = wire["gatherings"][0]["members"][0]
        assert member["expenses"][0]["amount"] == "12.50"
        assert member["payments"][0]["amount"] == "-3"


class TestInvalidTokens:
    """Tests that malformed input raises InvalidFormatError."""

    @pytest.mark.parametrize("token", [
        "not base64 at all!!",
        base64.b64encode(b"\xff\xfe\xfd").decode("ascii"),
        base64.b64encode(b"{not json").decode("ascii"),
        _token([]),
        _token({"gatherings": []}),
        _token({"globalMembers": []}),
        _token({"gatherings": {}, "globalMembers": []}),
        _token({"gatherings": [{"no": "id"}], "globalMembers": []}),
        "",
    ])
    def test_rejects_malformed(self, token):
        """Test decoding, parsing and shape failures are all InvalidFormat."""
        with pytest.raises(InvalidFormatError, match="Failed to import data"):
            decode_token(token)

    def test_rejects_non_string(self):
        """Test non-string tokens are rejected."""
        with pytest.raises(InvalidFormatError):
            decode_token(None)

    def test_failed_import_leaves_store(self, repo, trio):
        """Test a rejected import does not overwrite anything."""
        before = repo.store.load()
        with pytest.raises(InvalidFormatError):
            repo.import_data("garbage")
        assert repo.store.load() == before

    def test_no_uniqueness_revalidation(self):
        """Test import checks structure only, not cross-entity uniqueness."""
        token = _token({
            "gatherings": [],
            "globalMembers": [
                {"id": "m1", "name": "Alice"},
                {"id": "m2", "name": "alice"},
            ],
        })
        assert len(decode_token(token).global_members) == 2
