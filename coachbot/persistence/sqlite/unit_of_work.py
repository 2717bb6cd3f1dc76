"""SQLite-backed Unit of Work implementation aggregating repositories.

This adapter composes repository implementations and manages transaction
boundaries. With ``immediate=True`` the transaction starts with
``BEGIN IMMEDIATE`` so the database write lock is taken up front. On context
exit it commits when no exception occurred; otherwise it rolls back. The
connection is closed on exit when the Unit of Work owns it.
"""

from __future__ import annotations

import sqlite3

from ..interfaces.repos import IUnitOfWork
from .journal_repo import JournalRepoSqlite
from .profile_repo import ProfileRepoSqlite


class UnitOfWorkSqlite(IUnitOfWork):
    """Unit of Work implementation for SQLite."""

    def __init__(self, conn: sqlite3.Connection, *, immediate: bool = False, owns_connection: bool = False) -> None:
        self._conn = conn
        self._immediate = immediate
        self._owns_connection = owns_connection
        self.journal = JournalRepoSqlite(conn)
        self.profiles = ProfileRepoSqlite(conn)
        self._active = False

    def __enter__(self) -> "UnitOfWorkSqlite":
        """Enter the managed context, opening the transaction if requested."""
        if self._immediate and not self._conn.in_transaction:
            self._conn.execute("BEGIN IMMEDIATE")
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Commit if no exception was raised; otherwise roll back."""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._active = False
            if self._owns_connection:
                self._conn.close()

    def commit(self) -> None:
        """Commit the current transaction."""
        self._conn.commit()

    def rollback(self) -> None:
        """Rollback the current transaction (idempotent)."""
        self._conn.rollback()
