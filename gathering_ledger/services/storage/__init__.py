"""
Storage Services Package

Provides the abstract store interface and concrete backends.
The JSON file backend is the default; the memory backend serves tests.
"""

from gathering_ledger.services.storage.interface import (
    StorageError,
    StoreInterface,
    parse_store,
)
from gathering_ledger.services.storage.json_file import DEFAULT_STORE_KEY, JsonFileStore
from gathering_ledger.services.storage.memory import MemoryStore

__all__ = [
    # Interface
    "StoreInterface",
    "parse_store",
    # Exceptions
    "StorageError",
    # Implementations
    "DEFAULT_STORE_KEY",
    "JsonFileStore",
    "MemoryStore",
]
