"""SQLite engine helpers for the persistence layer.

Purpose
-------
Provide centralized helpers for opening SQLite connections and ensuring the
journal schema exists.

External dependencies
---------------------
- Standard library only (``sqlite3``). No side effects at import time.

Timeout and reliability strategy
--------------------------------
- Applies a standard ``busy_timeout`` (milliseconds) from
  ``coachbot.config.defaults`` to mitigate lock contention.
- Enables WAL journaling and NORMAL synchronous mode for durability with good
  interactive performance.

Threading
---------
Connections are opened per operation inside worker threads (see
``persistence.journal_store``); a connection is never shared across threads.
"""

from __future__ import annotations

import sqlite3

from pathlib import Path
from typing import Optional

from ...config.defaults import (
    DEFAULT_DB_FILENAME,
    SQLITE_BUSY_TIMEOUT_MS,
    SQLITE_JOURNAL_MODE,
    SQLITE_SYNCHRONOUS,
)


def get_db_path(db_path: Optional[str] = None) -> Path:
    """Return a concrete database file path.

    When ``db_path`` is ``None`` the file lives in the current working
    directory. User-provided values go through ``Path.expanduser()``.
    """
    return Path(db_path).expanduser() if db_path else Path.cwd() / DEFAULT_DB_FILENAME


def create_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a SQLite connection with sane defaults and apply PRAGMA settings.

    Behavior
    --------
    - Ensures the parent directory exists prior to opening the database file.
    - Avoids ``detect_types`` so that TIMESTAMP columns are returned as raw
      strings; repository code is responsible for explicit ISO8601 handling.
    - Applies journal mode, synchronous mode, and busy timeout from centralized
      defaults.

    Returns
    -------
    sqlite3.Connection
        An open connection with ``row_factory`` set to ``sqlite3.Row``.
    """
    path = get_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=SQLITE_BUSY_TIMEOUT_MS / 1000.0)
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE};")
    conn.execute(f"PRAGMA synchronous={SQLITE_SYNCHRONOUS};")
    conn.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS};")  # ms
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create required tables if they do not exist, then commit.

    Schema overview
    ---------------
    - ``journal_entries``: one row per turn; ``seq`` orders entries within a
      ``(user_id, day)`` log and is unique per log, so two writers can never
      claim the same position.
    - ``profiles``: one row per user; ``name`` / ``style`` start NULL.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS journal_entries (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            day INTEGER NOT NULL,
            seq INTEGER NOT NULL,
            role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
            message TEXT NOT NULL,
            created_at TEXT NOT NULL,
            UNIQUE (user_id, day, seq)
        );
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS profiles (
            user_id TEXT PRIMARY KEY,
            name TEXT,
            style TEXT,
            created_at TEXT NOT NULL
        );
        """
    )
    conn.commit()
