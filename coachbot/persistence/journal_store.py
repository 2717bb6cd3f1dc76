"""Async journal and profile stores.

These are the only objects the service layer uses to touch persistent state.

Serialization
-------------
Every ``(user_id, day)`` log has one ``asyncio.Lock``. ``append`` holds it
while the row is written, so appends to one log are applied in the order the
calls reach the lock (``asyncio.Lock`` wakes waiters FIFO) and none can
overwrite another. Each append is a single-row insert; nothing is read back
and rewritten. Across processes the ``BEGIN IMMEDIATE`` transaction and the
``UNIQUE(user_id, day, seq)`` constraint give the same guarantee.

Blocking SQLite calls run in worker threads via ``asyncio.to_thread`` with a
connection opened per call.

Failure semantics
-----------------
Any ``sqlite3.Error`` is logged (``journal.persist_failed``) and re-raised as
:class:`PersistenceError`. A failed append rolls back its own transaction and
leaves earlier entries untouched.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from contextlib import asynccontextmanager, closing
from typing import AsyncIterator, Dict, List, Optional, Tuple

from ..base.errors import PersistenceError
from ..base.logging import LogContext, get_logger, log_event
from ..base.utils.heuristics import ProfileUpdate
from .interfaces.repos import JournalEntry, Profile
from .sqlite import get_uow
from .sqlite.engine import create_connection, init_schema

_logger = get_logger("persistence.journal")


class _KeyedLocks:
    """One ``asyncio.Lock`` per key, kept only while a holder or waiter exists."""

    def __init__(self) -> None:
        self._locks: Dict[object, asyncio.Lock] = {}
        self._users: Dict[object, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: object) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


class _SqliteBacked:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._locks = _KeyedLocks()
        with closing(create_connection(db_path)) as conn:
            init_schema(conn)

    def _fail(self, op: str, exc: BaseException, ctx: Optional[LogContext]) -> PersistenceError:
        log_event(
            _logger,
            "journal.persist_failed",
            ctx,
            level=logging.ERROR,
            op=op,
            error=f"{type(exc).__name__}: {exc}",
        )
        return PersistenceError(message=f"{op} failed: {exc}", raw=exc)


class JournalStore(_SqliteBacked):
    """Per-user, per-day ordered append log."""

    async def append(
        self,
        user_id: str,
        day: int,
        entry: JournalEntry,
        *,
        ctx: Optional[LogContext] = None,
    ) -> JournalEntry:
        """Append ``entry`` to the ``(user_id, day)`` log; return it with ``seq``.

        Returns once the row is committed.

        Raises:
            PersistenceError: When the write could not be made durable.
        """
        key: Tuple[str, int] = (user_id, int(day))
        async with self._locks.hold(key):
            try:
                stored = await asyncio.to_thread(self._append_sync, user_id, int(day), entry)
            except sqlite3.Error as e:
                raise self._fail("journal.append", e, ctx) from e
        log_event(_logger, "journal.append", ctx, role=stored.role, seq=stored.seq, chars=len(stored.text))
        return stored

    async def read(self, user_id: str, day: int, limit: Optional[int] = None) -> List[JournalEntry]:
        """Return the log oldest first, restricted to the newest ``limit`` entries."""
        try:
            return await asyncio.to_thread(self._read_sync, user_id, int(day), limit)
        except sqlite3.Error as e:
            raise self._fail("journal.read", e, None) from e

    def _append_sync(self, user_id: str, day: int, entry: JournalEntry) -> JournalEntry:
        with get_uow(self.db_path, immediate=True) as uow:
            return uow.journal.append(user_id, day, entry)

    def _read_sync(self, user_id: str, day: int, limit: Optional[int]) -> List[JournalEntry]:
        with get_uow(self.db_path) as uow:
            return uow.journal.read(user_id, day, limit)


class ProfileStore(_SqliteBacked):
    """Per-user profile with write-once heuristic updates."""

    async def get(self, user_id: str) -> Profile:
        """Return the stored profile, or an empty one when none exists yet."""
        try:
            found = await asyncio.to_thread(self._get_sync, user_id)
        except sqlite3.Error as e:
            raise self._fail("profile.get", e, None) from e
        return found or Profile(user_id=user_id)

    async def apply(self, user_id: str, update: ProfileUpdate, *, ctx: Optional[LogContext] = None) -> Profile:
        """Create the profile lazily and fill only still-unset fields."""
        async with self._locks.hold(user_id):
            try:
                before = await asyncio.to_thread(self._get_sync, user_id)
                after = await asyncio.to_thread(self._fill_sync, user_id, update)
            except sqlite3.Error as e:
                raise self._fail("profile.apply", e, ctx) from e
        changed = [
            f for f in ("name", "style")
            if getattr(after, f) != getattr(before, f, None)
        ]
        if changed:
            log_event(_logger, "profile.updated", ctx, fields=changed)
        return after

    async def overwrite(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        style: Optional[str] = None,
        ctx: Optional[LogContext] = None,
    ) -> Profile:
        """Administrative edit; explicit values replace stored ones."""
        async with self._locks.hold(user_id):
            try:
                profile = await asyncio.to_thread(self._overwrite_sync, user_id, name, style)
            except sqlite3.Error as e:
                raise self._fail("profile.overwrite", e, ctx) from e
        log_event(_logger, "profile.updated", ctx, fields=[f for f, v in (("name", name), ("style", style)) if v is not None])
        return profile

    def _get_sync(self, user_id: str) -> Optional[Profile]:
        with get_uow(self.db_path) as uow:
            return uow.profiles.get(user_id)

    def _fill_sync(self, user_id: str, update: ProfileUpdate) -> Profile:
        with get_uow(self.db_path, immediate=True) as uow:
            return uow.profiles.fill_missing(user_id, update.name, update.style)

    def _overwrite_sync(self, user_id: str, name: Optional[str], style: Optional[str]) -> Profile:
        with get_uow(self.db_path, immediate=True) as uow:
            return uow.profiles.overwrite(user_id, name, style)


__all__ = ["JournalStore", "ProfileStore"]
