"""SQLite-backed implementation of ``IJournalRepo``.

``append`` computes the next per-log sequence number and inserts one row in
the same statement, inside the caller's transaction. The Unit of Work opens
that transaction with ``BEGIN IMMEDIATE``, so the write lock is held from the
sequence lookup until commit; the ``UNIQUE(user_id, day, seq)`` constraint
rejects any duplicate position instead of silently reordering.
"""

from __future__ import annotations

import sqlite3
from typing import List, Optional

from ..interfaces.repos import IJournalRepo, JournalEntry, iso_timestamp
from .helpers import _entry_from_row

_SELECT_COLUMNS = "seq, role, message, created_at"


class JournalRepoSqlite(IJournalRepo):
    """SQLite-backed per-user, per-day journal."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def append(self, user_id: str, day: int, entry: JournalEntry) -> JournalEntry:
        cur = self.conn.execute(
            """
            INSERT INTO journal_entries(user_id, day, seq, role, message, created_at)
            SELECT ?, ?, COALESCE(MAX(seq), 0) + 1, ?, ?, ?
            FROM journal_entries WHERE user_id = ? AND day = ?
            """,
            (user_id, day, entry.role, entry.text, iso_timestamp(entry.timestamp), user_id, day),
        )
        row = self.conn.execute(
            "SELECT seq FROM journal_entries WHERE id = ?", (cur.lastrowid,)
        ).fetchone()
        return JournalEntry(role=entry.role, text=entry.text, timestamp=entry.timestamp, seq=int(row["seq"]))

    def read(self, user_id: str, day: int, limit: Optional[int] = None) -> List[JournalEntry]:
        if limit is None:
            cur = self.conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM journal_entries WHERE user_id = ? AND day = ? ORDER BY seq ASC",
                (user_id, day),
            )
            return [_entry_from_row(r) for r in cur.fetchall()]
        cur = self.conn.execute(
            f"SELECT {_SELECT_COLUMNS} FROM journal_entries WHERE user_id = ? AND day = ? ORDER BY seq DESC LIMIT ?",
            (user_id, day, max(0, int(limit))),
        )
        rows = cur.fetchall()
        rows.reverse()
        return [_entry_from_row(r) for r in rows]
