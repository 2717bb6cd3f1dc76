"""Async journal/profile stores: ordering under concurrency and failure surfacing."""
from __future__ import annotations

import asyncio
import sqlite3

import pytest

from coachbot.base.errors import ErrorCode, PersistenceError
from coachbot.base.logging import LogContext
from coachbot.base.utils.heuristics import ProfileUpdate
from coachbot.persistence.interfaces.repos import JournalEntry
from coachbot.persistence.journal_store import JournalStore, ProfileStore

from ..helpers import events_of


def test_concurrent_appends_keep_submission_order(db_path):
    store = JournalStore(db_path)
    n = 25

    async def _run():
        await asyncio.gather(
            *(store.append("u1", 1, JournalEntry.create("user", f"m{i}")) for i in range(n))
        )
        return await store.read("u1", 1)

    entries = asyncio.run(_run())
    assert [e.text for e in entries] == [f"m{i}" for i in range(n)]
    assert [e.seq for e in entries] == list(range(1, n + 1))


def test_log_locks_are_released_once_idle(db_path, monkeypatch):
    journal, profiles = JournalStore(db_path), ProfileStore(db_path)

    async def _run():
        await asyncio.gather(
            *(journal.append(f"u{i % 3}", i % 4 + 1, JournalEntry.create("user", "x")) for i in range(24)),
            *(profiles.apply(f"u{i}", ProfileUpdate(name="Léa")) for i in range(5)),
        )
        return len(journal._locks), len(profiles._locks)

    assert asyncio.run(_run()) == (0, 0)

    def _fail(*_args, **_kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(journal, "_append_sync", _fail)
    with pytest.raises(PersistenceError):
        asyncio.run(journal.append("u1", 1, JournalEntry.create("user", "lost")))
    assert len(journal._locks) == 0


def test_logs_for_different_days_and_users_are_independent(db_path):
    store = JournalStore(db_path)

    async def _run():
        await asyncio.gather(
            *(
                store.append(user, day, JournalEntry.create("user", f"{user}-{day}-{i}"))
                for i in range(5)
                for user in ("a", "b")
                for day in (1, 2)
            )
        )
        return {(u, d): await store.read(u, d) for u in ("a", "b") for d in (1, 2)}

    logs = asyncio.run(_run())
    for (user, day), entries in logs.items():
        assert [e.text for e in entries] == [f"{user}-{day}-{i}" for i in range(5)]
        assert [e.seq for e in entries] == [1, 2, 3, 4, 5]


def test_two_stores_on_one_database_never_lose_entries(db_path):
    first, second = JournalStore(db_path), JournalStore(db_path)

    async def _run():
        await asyncio.gather(
            *(
                store.append("u1", 1, JournalEntry.create("user", f"{tag}{i}"))
                for i in range(10)
                for tag, store in (("x", first), ("y", second))
            )
        )
        return await first.read("u1", 1)

    entries = asyncio.run(_run())
    assert len(entries) == 20
    assert [e.seq for e in entries] == list(range(1, 21))
    assert [e.text for e in entries if e.text.startswith("x")] == [f"x{i}" for i in range(10)]


def test_read_limit_and_empty_log(db_path):
    store = JournalStore(db_path)

    async def _run():
        for i in range(4):
            await store.append("u1", 3, JournalEntry.create("assistant" if i % 2 else "user", f"t{i}"))
        return await store.read("u1", 3, limit=3), await store.read("u1", 4)

    newest, empty = asyncio.run(_run())
    assert [e.text for e in newest] == ["t1", "t2", "t3"]
    assert empty == []


def test_append_logs_event_with_context(db_path, log_records):
    store = JournalStore(db_path)
    ctx = LogContext(user_id="u1", day=1, request_id="r-1")
    stored = asyncio.run(store.append("u1", 1, JournalEntry.create("user", "Salut"), ctx=ctx))
    assert stored.seq == 1
    evt = [e for e in events_of(log_records) if e["event"] == "journal.append"][-1]
    assert evt["request_id"] == "r-1" and evt["role"] == "user" and evt["seq"] == 1


def test_failed_append_raises_persistence_error_and_keeps_earlier_entries(db_path, monkeypatch, log_records):
    store = JournalStore(db_path)
    asyncio.run(store.append("u1", 1, JournalEntry.create("user", "kept")))

    def _fail(*_args, **_kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(store, "_append_sync", _fail)
    with pytest.raises(PersistenceError) as exc:
        asyncio.run(store.append("u1", 1, JournalEntry.create("assistant", "lost")))
    assert exc.value.code == ErrorCode.PERSISTENCE
    assert "disk I/O error" in exc.value.message

    monkeypatch.delattr(store, "_append_sync")
    assert [e.text for e in asyncio.run(store.read("u1", 1))] == ["kept"]
    failed = [e for e in events_of(log_records) if e["event"] == "journal.persist_failed"]
    assert failed and failed[-1]["op"] == "journal.append"


def test_profile_store_is_lazy_and_write_once(db_path, log_records):
    store = ProfileStore(db_path)

    async def _run():
        empty = await store.get("u1")
        first = await store.apply("u1", ProfileUpdate(name="Léa"))
        second = await store.apply("u1", ProfileUpdate(name="Autre", style="C"))
        third = await store.apply("u1", ProfileUpdate(style="D"))
        return empty, first, second, third

    empty, first, second, third = asyncio.run(_run())
    assert (empty.name, empty.style) == (None, None)
    assert (first.name, first.style) == ("Léa", None)
    assert (second.name, second.style) == ("Léa", "C")
    assert (third.name, third.style) == ("Léa", "C")
    updates = [e["fields"] for e in events_of(log_records) if e["event"] == "profile.updated"]
    assert updates == [["name"], ["style"]]


def test_profile_overwrite_replaces_values(db_path):
    store = ProfileStore(db_path)

    async def _run():
        await store.apply("u1", ProfileUpdate(name="Léa", style="S"))
        return await store.overwrite("u1", name="Lea", style=None)

    profile = asyncio.run(_run())
    assert (profile.name, profile.style) == ("Lea", "S")
