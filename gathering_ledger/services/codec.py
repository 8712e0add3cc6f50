"""
Import/Export Codec

Serializes the whole store into one opaque, transport-safe token and
restores it.

Token format: standard base64 of the UTF-8 bytes of the store's JSON
(camelCase wire names). Names and descriptions may hold any Unicode.

Amounts are written as decimal strings ("12.50"), not JSON numbers, so
no precision is lost in transit. Import accepts both, which keeps
exports from the original numeric layout loadable.

DESIGN DECISION: Import only checks structure - a JSON object with list
values for "gatherings" and "globalMembers" whose entries fit the models.
It does not re-check cross-entity rules such as unique ids or names.
"""

import base64
import binascii
import json

from gathering_ledger.models import AppData
from gathering_ledger.services.errors import InvalidFormatError

IMPORT_ERROR_MESSAGE = "Failed to import data. Please check the format."


def encode_store(data: AppData) -> str:
    """Encode the full store as a base64 token."""
    json_text = data.model_dump_json(by_alias=True)
    return base64.b64encode(json_text.encode("utf-8")).decode("ascii")


def decode_token(token: str) -> AppData:
    """
    Decode a token produced by encode_store.

    Raises:
        InvalidFormatError: If base64 decoding, UTF-8 decoding, JSON
            parsing or the structural check fails
    """
    if not isinstance(token, str):
        raise InvalidFormatError(IMPORT_ERROR_MESSAGE)

    try:
        raw_bytes = base64.b64decode(token.strip(), validate=True)
        raw = json.loads(raw_bytes.decode("utf-8"))
        if (
            not isinstance(raw, dict)
            or not isinstance(raw.get("gatherings"), list)
            or not isinstance(raw.get("globalMembers"), list)
        ):
            raise ValueError("Invalid data format")
        return AppData.model_validate(raw)
    except (binascii.Error, ValueError) as e:
        # UnicodeDecodeError, JSONDecodeError and ValidationError are ValueErrors
        raise InvalidFormatError(IMPORT_ERROR_MESSAGE) from e
