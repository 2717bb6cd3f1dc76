"""Public re-exports for SQLite repository adapters and Unit of Work.

Thin aggregator preserving import stability while keeping concrete
implementations in focused one-class-per-file modules.
"""

from .journal_repo import JournalRepoSqlite
from .profile_repo import ProfileRepoSqlite
from .unit_of_work import UnitOfWorkSqlite
from .helpers import _parse_created_at  # re-export for test compatibility

__all__ = [
    "JournalRepoSqlite",
    "ProfileRepoSqlite",
    "UnitOfWorkSqlite",
    "_parse_created_at",
]
