from __future__ import annotations

import sqlite3
from typing import Optional

from .engine import create_connection, init_schema
from .repos import UnitOfWorkSqlite


def get_uow(db_path: Optional[str] = None, *, immediate: bool = False) -> UnitOfWorkSqlite:
    """Open a fresh connection and wrap it in a Unit of Work that closes it."""
    conn: sqlite3.Connection = create_connection(db_path)
    return UnitOfWorkSqlite(conn, immediate=immediate, owns_connection=True)


__all__ = [
    "create_connection",
    "init_schema",
    "UnitOfWorkSqlite",
    "get_uow",
]
