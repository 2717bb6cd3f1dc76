"""
Normalized error codes (taxonomy).

Defines the `ErrorCode` enumeration used by adapters, the relay, and the
journal store. Values are lowercase snake_case and are considered a stable
public contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    UNSUPPORTED = "unsupported"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    DECODE_ANOMALY = "decode_anomaly"
    PERSISTENCE = "persistence"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
