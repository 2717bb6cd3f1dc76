"""SQLite-backed implementation of ``IProfileRepo``.

Write-once semantics live in SQL: ``fill_missing`` only touches a column
while it is still NULL, so a value set by an earlier message survives any
later heuristic result.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from ..interfaces.repos import IProfileRepo, Profile, iso_timestamp
from .helpers import _profile_from_row


class ProfileRepoSqlite(IProfileRepo):
    """SQLite-backed profile repository."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get(self, user_id: str) -> Optional[Profile]:
        r = self.conn.execute(
            "SELECT user_id, name, style FROM profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        return _profile_from_row(r) if r else None

    def _ensure(self, user_id: str) -> None:
        self.conn.execute(
            "INSERT OR IGNORE INTO profiles(user_id, created_at) VALUES(?, ?)",
            (user_id, iso_timestamp(datetime.now(timezone.utc))),
        )

    def fill_missing(self, user_id: str, name: Optional[str], style: Optional[str]) -> Profile:
        self._ensure(user_id)
        if name:
            self.conn.execute(
                "UPDATE profiles SET name = ? WHERE user_id = ? AND name IS NULL", (name, user_id)
            )
        if style:
            self.conn.execute(
                "UPDATE profiles SET style = ? WHERE user_id = ? AND style IS NULL", (style, user_id)
            )
        return self.get(user_id) or Profile(user_id=user_id)

    def overwrite(self, user_id: str, name: Optional[str], style: Optional[str]) -> Profile:
        self._ensure(user_id)
        if name is not None:
            self.conn.execute("UPDATE profiles SET name = ? WHERE user_id = ?", (name, user_id))
        if style is not None:
            self.conn.execute("UPDATE profiles SET style = ? WHERE user_id = ?", (style, user_id))
        return self.get(user_id) or Profile(user_id=user_id)
