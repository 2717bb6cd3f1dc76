"""
Contract tests for SQLite repository adapters and UnitOfWork behavior.

These tests use an in-memory SQLite database and call `init_schema` to
initialize tables. They validate:
- Journal sequence numbering and ordering per (user, day)
- Newest-N reads returned oldest first
- Profile write-once fill vs administrative overwrite
- Commit vs rollback
"""
from __future__ import annotations

import sqlite3
from contextlib import closing
from datetime import datetime, timezone

import pytest

from coachbot.persistence.interfaces.repos import JournalEntry, iso_timestamp, normalize_role
from coachbot.persistence.sqlite import get_uow
from coachbot.persistence.sqlite.engine import create_connection, init_schema
from coachbot.persistence.sqlite.repos import UnitOfWorkSqlite


def _make_conn() -> sqlite3.Connection:
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    init_schema(conn)
    return conn


def test_sequence_is_per_log_and_reads_are_ordered():
    conn = _make_conn()
    with UnitOfWorkSqlite(conn) as uow:
        a = uow.journal.append("u1", 1, JournalEntry.create("user", "one"))
        b = uow.journal.append("u1", 1, JournalEntry.create("assistant", "two"))
        other_day = uow.journal.append("u1", 2, JournalEntry.create("user", "x"))
        other_user = uow.journal.append("u2", 1, JournalEntry.create("user", "y"))
    assert (a.seq, b.seq, other_day.seq, other_user.seq) == (1, 2, 1, 1)

    with UnitOfWorkSqlite(conn) as uow:
        entries = uow.journal.read("u1", 1)
    assert [(e.seq, e.role, e.text) for e in entries] == [(1, "user", "one"), (2, "assistant", "two")]
    assert entries[0].timestamp.tzinfo is not None


def test_read_limit_returns_newest_entries_oldest_first():
    conn = _make_conn()
    with UnitOfWorkSqlite(conn) as uow:
        for i in range(5):
            uow.journal.append("u1", 1, JournalEntry.create("user", f"m{i}"))
        assert [e.text for e in uow.journal.read("u1", 1, limit=2)] == ["m3", "m4"]
        assert uow.journal.read("u1", 1, limit=0) == []
        assert uow.journal.read("nobody", 1) == []


def test_duplicate_sequence_is_rejected():
    conn = _make_conn()
    conn.execute(
        "INSERT INTO journal_entries(user_id, day, seq, role, message, created_at) VALUES('u', 1, 1, 'user', 'a', 'x')"
    )
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO journal_entries(user_id, day, seq, role, message, created_at) VALUES('u', 1, 1, 'user', 'b', 'x')"
        )


def test_role_check_constraint():
    conn = _make_conn()
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO journal_entries(user_id, day, seq, role, message, created_at) VALUES('u', 1, 1, 'system', 'a', 'x')"
        )


def test_rollback_discards_append():
    conn = _make_conn()
    with pytest.raises(RuntimeError):
        with UnitOfWorkSqlite(conn) as uow:
            uow.journal.append("u1", 1, JournalEntry.create("user", "lost"))
            raise RuntimeError("abort")
    with UnitOfWorkSqlite(conn) as uow:
        assert uow.journal.read("u1", 1) == []


def test_profile_fill_missing_is_write_once():
    conn = _make_conn()
    with UnitOfWorkSqlite(conn) as uow:
        assert uow.profiles.get("u1") is None
        p = uow.profiles.fill_missing("u1", "Léa", None)
        assert (p.name, p.style) == ("Léa", None)
        p = uow.profiles.fill_missing("u1", "Autre", "S")
        assert (p.name, p.style) == ("Léa", "S")


def test_profile_overwrite_replaces_explicit_values_only():
    conn = _make_conn()
    with UnitOfWorkSqlite(conn) as uow:
        uow.profiles.fill_missing("u1", "Léa", "S")
        p = uow.profiles.overwrite("u1", None, "D")
        assert (p.name, p.style) == ("Léa", "D")


def test_get_uow_owns_and_closes_its_connection(tmp_path):
    path = str(tmp_path / "db" / "journal.db")
    with closing(create_connection(path)) as conn:
        init_schema(conn)
    uow = get_uow(path, immediate=True)
    with uow:
        uow.journal.append("u", 1, JournalEntry.create("user", "persisted"))
    with pytest.raises(sqlite3.ProgrammingError):
        uow._conn.execute("SELECT 1")
    with get_uow(path) as uow2:
        assert [e.text for e in uow2.journal.read("u", 1)] == ["persisted"]


def test_normalize_role_and_timestamp_format():
    assert normalize_role("AI") == "assistant"
    assert normalize_role(None) == "user"
    with pytest.raises(ValueError):
        normalize_role("system")
    ts = datetime(2024, 5, 1, 8, 30, 0, 123456, tzinfo=timezone.utc)
    assert iso_timestamp(ts) == "2024-05-01T08:30:00.123Z"
    entry = JournalEntry(role="user", text="hi", timestamp=ts)
    assert entry.to_wire() == {"role": "user", "message": "hi", "date": "2024-05-01T08:30:00.123Z"}
