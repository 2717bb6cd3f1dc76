"""Persistence interfaces package.

Defines repository protocols and shared DTOs for the journal and profiles,
plus a Unit of Work abstraction. Concrete implementations live under
persistence adapters such as SQLite.
"""

from .repos import (  # noqa: F401
    IJournalRepo,
    IProfileRepo,
    IUnitOfWork,
    JournalEntry,
    Profile,
    iso_timestamp,
    normalize_role,
)
