"""
Shared fixtures.

Repositories run against MemoryStore so no test touches the disk unless
it asks for tmp_path explicitly.
"""

import pytest

from gathering_ledger import api
from gathering_ledger.config import get_settings
from gathering_ledger.services import GatheringRepository, MemoryStore


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def repo(store):
    return GatheringRepository(store)


@pytest.fixture
def trio(repo):
    """Gathering g1 with members Alice, Bob and Carol; Alice spent 90."""
    alice = repo.create_global_member("Alice")
    bob = repo.create_global_member("Bob")
    carol = repo.create_global_member("Carol")
    repo.create_gathering("g1", "Weekend trip")
    for member in (alice, bob, carol):
        repo.add_member_to_gathering("g1", member.id)
    repo.add_expense("g1", alice.id, 90)
    return alice, bob, carol


@pytest.fixture(autouse=True)
def reset_globals():
    """Settings and the api repository are process-wide; isolate each test."""
    get_settings.cache_clear()
    api.set_repository(None)
    yield
    get_settings.cache_clear()
    api.set_repository(None)
