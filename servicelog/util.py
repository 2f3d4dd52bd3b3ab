"""Id, timestamp and text helpers."""

from __future__ import annotations

import os
import re
import time
from datetime import datetime, timezone


# Crockford base32, as used by ULIDs
_ID_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_TAG_RE = re.compile(r"<[^>]*>")


def new_ulid(*, timestamp_ms: int | None = None) -> str:
    """Note id: a 26-character ULID, so ids sort by creation time."""
    ms = now_ms() if timestamp_ms is None else timestamp_ms
    if not 0 <= ms < 1 << 48:
        raise ValueError(f"note timestamp out of id range: {ms}")
    value = ms << 80 | int.from_bytes(os.urandom(10), "big")
    return "".join(_ID_ALPHABET[(value >> shift) & 31] for shift in range(125, -1, -5))


def now_ms() -> int:
    return int(time.time() * 1000)


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def strip_tags(html: str) -> str:
    """Remove markup tags, keeping only the text between them."""
    return _TAG_RE.sub("", html or "")


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
