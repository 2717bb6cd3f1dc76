"""Shared helper functions for SQLite repository adapters.

All timestamps are normalized to timezone-aware UTC ``datetime`` objects on
read to avoid reliance on sqlite's deprecated default datetime adapter.
"""

from __future__ import annotations

from contextlib import suppress
from datetime import datetime, timezone
from typing import Any

from ..interfaces.repos import JournalEntry, Profile


def _parse_created_at(raw: Any) -> datetime:
    """Parse a stored timestamp into an aware UTC ``datetime``.

    Strategy:
    - If ``raw`` is already a ``datetime``: ensure tz-aware (assume UTC if naive).
    - If ``raw`` is a string: attempt ISO8601 parse (a trailing ``Z`` is
      accepted), coercing naive to UTC.
    - On malformed input: return epoch UTC.
    """
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, str):
        text = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        with suppress(ValueError, TypeError):
            dt = datetime.fromisoformat(text)
            return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return datetime.fromtimestamp(0, tz=timezone.utc)


def _entry_from_row(r: Any) -> JournalEntry:
    """Convert a ``journal_entries`` row (seq, role, message, created_at)."""
    return JournalEntry(
        role=r["role"],
        text=r["message"],
        timestamp=_parse_created_at(r["created_at"]),
        seq=int(r["seq"]),
    )


def _profile_from_row(r: Any) -> Profile:
    return Profile(user_id=r["user_id"], name=r["name"], style=r["style"])
