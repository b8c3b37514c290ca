"""Opaque continuation cursors for date-ordered ledger pages."""

import base64
import binascii
import json
from datetime import date
from typing import Tuple


class InvalidCursor(ValueError):
    """Raised when a cursor string cannot be decoded."""


def encode_cursor(entry_date: date, entry_id: str) -> str:
    """Encode the position of the last returned entry."""

    raw = json.dumps({"d": entry_date.isoformat(), "i": entry_id}, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> Tuple[date, str]:
    """Return ``(date, id)`` of the entry the cursor points past."""

    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        return date.fromisoformat(payload["d"]), str(payload["i"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as exc:
        raise InvalidCursor("Invalid pagination cursor.") from exc
