"""Repository & Unit of Work protocol definitions for the journal layer.

This module declares the contracts used by the async stores and the FastAPI
service layer. Concrete implementations live under ``persistence/sqlite/``.

Design Principles:
- No concrete behavior; pure structural typing via ``Protocol``.
- Dataclasses represent DTOs crossing repository boundaries.
- Transaction control is delegated to the ``IUnitOfWork`` implementation;
  repositories never commit.

Failure / Error Semantics:
- Repository methods raise backend-specific exceptions (``sqlite3.Error``).
  The async stores translate them into ``PersistenceError``.

Ordering:
- A journal log is identified by ``(user_id, day)``. Entries carry a per-log
  sequence number assigned at insert time; reads return entries ordered by it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Protocol

JournalRole = Literal["user", "assistant"]
JOURNAL_ROLES = ("user", "assistant")
LEGACY_ROLE_ALIASES = {"ai": "assistant", "bot": "assistant"}


def normalize_role(role: Optional[str]) -> str:
    """Map a caller-supplied role to a stored role (``ai`` -> ``assistant``).

    Raises:
        ValueError: For roles outside the journal vocabulary.
    """
    r = (role or "user").strip().lower()
    r = LEGACY_ROLE_ALIASES.get(r, r)
    if r not in JOURNAL_ROLES:
        raise ValueError(f"unsupported journal role: {role!r}")
    return r


def iso_timestamp(dt: datetime) -> str:
    """Render ``dt`` as an ISO-8601 UTC string with millisecond precision."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------- Data Transfer Objects ----------


@dataclass(frozen=True)
class JournalEntry:
    """One immutable conversation turn.

    Attributes
    ----------
    role: ``user`` or ``assistant``.
    text: Message body.
    timestamp: UTC time the entry was created.
    seq: Position within its ``(user_id, day)`` log; ``None`` until stored.
    """

    role: str
    text: str
    timestamp: datetime
    seq: Optional[int] = None

    @classmethod
    def create(cls, role: str, text: str) -> "JournalEntry":
        return cls(role=normalize_role(role), text=text, timestamp=datetime.now(timezone.utc))

    def to_wire(self) -> Dict[str, Any]:
        """Return the ``{role, message, date}`` shape served to callers."""
        return {"role": self.role, "message": self.text, "date": iso_timestamp(self.timestamp)}


@dataclass(frozen=True)
class Profile:
    """Per-user derived attributes. ``None`` means not yet known."""

    user_id: str
    name: Optional[str] = None
    style: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return {"name": self.name, "style": self.style}


# ---------- Repository Protocols ----------


class IJournalRepo(Protocol):
    """Per-user, per-day ordered append log."""

    def append(self, user_id: str, day: int, entry: JournalEntry) -> JournalEntry:
        """Insert ``entry`` at the end of the ``(user_id, day)`` log.

        Returns the stored entry with ``seq`` populated. No implicit commit.
        """
        ...

    def read(self, user_id: str, day: int, limit: Optional[int] = None) -> List[JournalEntry]:
        """Return the newest ``limit`` entries (all when ``None``), oldest first."""
        ...


class IProfileRepo(Protocol):
    """Profile storage with write-once field updates."""

    def get(self, user_id: str) -> Optional[Profile]:
        ...

    def fill_missing(self, user_id: str, name: Optional[str], style: Optional[str]) -> Profile:
        """Create the profile lazily and set only the fields that are still NULL."""
        ...

    def overwrite(self, user_id: str, name: Optional[str], style: Optional[str]) -> Profile:
        """Administrative edit: non-``None`` arguments replace stored values."""
        ...


class IUnitOfWork(Protocol):
    """Transactional boundary aggregating repository instances.

    All write operations are committed on clean scope exit and rolled back
    otherwise.
    """

    journal: IJournalRepo
    profiles: IProfileRepo

    def __enter__(self) -> "IUnitOfWork":  # pragma: no cover
        ...

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


__all__ = [
    "JournalRole",
    "JOURNAL_ROLES",
    "normalize_role",
    "iso_timestamp",
    "JournalEntry",
    "Profile",
    "IJournalRepo",
    "IProfileRepo",
    "IUnitOfWork",
]
