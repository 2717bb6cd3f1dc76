"""
Structured coachbot error types.

`CoachbotError` wraps failures with a normalized `ErrorCode` for consistent
handling and structured logging. The subclasses form the relay's taxonomy:

* ``UnsupportedProviderError`` - no adapter for the requested vendor name.
* ``UpstreamUnavailableError`` - missing credential, transport failure, or a
  non-success status when the upstream stream is opened.
* ``PersistenceError`` - the journal could not durably record an entry.
* ``CallerDisconnected`` - the caller went away mid-relay. Not a failure:
  the relay records it and tears down without further writes.

``UpstreamDecodeAnomaly`` is a record, not an exception: a frame that could
not be parsed is noted and skipped, never raised.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class CoachbotError(Exception):
    """Base structured error.

    Attributes:
        message: Human-readable error message, safe to surface to callers.
        code: Normalized :class:`ErrorCode` classification for the failure.
        provider: Vendor key where the error originated (if any).
        status: Upstream HTTP status when known.
        raw: Optional original exception for diagnostics.
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    provider: Optional[str] = None
    status: Optional[int] = None
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.provider or '-'} {self.code.value}: {self.message}"


@dataclass(eq=False)
class UnsupportedProviderError(CoachbotError):
    code: ErrorCode = ErrorCode.UNSUPPORTED


@dataclass(eq=False)
class UpstreamUnavailableError(CoachbotError):
    code: ErrorCode = ErrorCode.UNAVAILABLE


@dataclass(eq=False)
class PersistenceError(CoachbotError):
    code: ErrorCode = ErrorCode.PERSISTENCE


@dataclass(eq=False)
class CallerDisconnected(CoachbotError):
    code: ErrorCode = ErrorCode.CANCELLED


@dataclass(frozen=True)
class UpstreamDecodeAnomaly:
    """A ``data:`` payload that could not be parsed; recorded and ignored."""

    payload: str
    reason: str
    code: ErrorCode = ErrorCode.DECODE_ANOMALY


__all__ = [
    "CoachbotError",
    "UnsupportedProviderError",
    "UpstreamUnavailableError",
    "PersistenceError",
    "CallerDisconnected",
    "UpstreamDecodeAnomaly",
]
