"""
Record ids and UTC timestamp helpers.

- **generate_id():** Time-sortable 26-char Crockford base32 id (ULID layout)
- **utc_now():** Timezone-aware UTC datetime
- **to_iso8601() / parse_timestamp():** Serialization round-trip; parsing
  accepts the ``Z`` suffix written by JavaScript ``toISOString()`` and treats
  naive values as UTC

Tags:
    timestamps, ulid, utc, datetime, topic-spine
"""

from __future__ import annotations

import secrets
import time
from datetime import UTC, datetime

# ULID base32 alphabet (Crockford's)
_ENCODING = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_ENCODING_LEN = len(_ENCODING)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def generate_id() -> str:
    """
    Generate a new record id.

    48-bit millisecond timestamp (10 chars) followed by 80 random bits
    (16 chars), so ids created later sort after earlier ones.
    """
    timestamp_chars = _encode_base32(int(time.time() * 1000), 10)
    random_chars = _encode_base32(secrets.randbits(80), 16)
    return timestamp_chars + random_chars


def to_iso8601(dt: datetime) -> str:
    """Convert an aware datetime to an ISO 8601 string with a ``Z`` suffix."""
    return dt.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO 8601 string (or pass through a datetime) as aware UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _encode_base32(value: int, length: int) -> str:
    """Encode integer to base32 string of fixed length."""
    result = []
    for _ in range(length):
        result.append(_ENCODING[value % _ENCODING_LEN])
        value //= _ENCODING_LEN
    return "".join(reversed(result))


__all__ = ["utc_now", "generate_id", "to_iso8601", "parse_timestamp"]
