"""Services package."""

from gathering_ledger.services.codec import decode_token, encode_store
from gathering_ledger.services.errors import (
    AlreadyMemberError,
    DuplicateError,
    DuplicateIdError,
    DuplicateNameError,
    GatheringClosedError,
    InvalidAmountError,
    InvalidDateRangeError,
    InvalidFormatError,
    InvalidNameError,
    LedgerError,
    NoDataInRangeError,
    NotFoundError,
    ReportError,
)
from gathering_ledger.services.reports import build_balance_report, report_filename
from gathering_ledger.services.repository import GatheringRepository, to_amount
from gathering_ledger.services.storage import (
    JsonFileStore,
    MemoryStore,
    StorageError,
    StoreInterface,
)

__all__ = [
    # Repository
    "GatheringRepository",
    "to_amount",
    # Codec
    "decode_token",
    "encode_store",
    # Reports
    "build_balance_report",
    "report_filename",
    # Storage
    "JsonFileStore",
    "MemoryStore",
    "StorageError",
    "StoreInterface",
    # Errors
    "AlreadyMemberError",
    "DuplicateError",
    "DuplicateIdError",
    "DuplicateNameError",
    "GatheringClosedError",
    "InvalidAmountError",
    "InvalidDateRangeError",
    "InvalidFormatError",
    "InvalidNameError",
    "LedgerError",
    "NoDataInRangeError",
    "NotFoundError",
    "ReportError",
]
