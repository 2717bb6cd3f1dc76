"""Unified timeout configuration for upstream calls.

This module centralizes the timeout values used by the pooled HTTP client
and the relay's upstream read loop.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values (seconds).

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again whenever the relevant variables change). Supported
    environment variables (all optional):
        COACHBOT_TIMEOUT_CONNECT_SECONDS
        COACHBOT_TIMEOUT_READ_SECONDS
        COACHBOT_STREAM_IDLE_TIMEOUT_SECONDS

Idle timeout
------------
The observed behavior of the service is to wait indefinitely for an upstream
that never terminates its stream, so ``stream_idle_timeout_seconds`` defaults
to ``None``. Setting it is an operational hardening choice: the relay then
ends the session with an error frame followed by the terminator.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Timeout for establishing the TCP/TLS
            connection to the vendor.
        read_timeout_seconds: Per-read socket timeout for non-streaming
            calls. ``None`` disables it.
        stream_idle_timeout_seconds: Maximum wait for the next upstream chunk
            while relaying. ``None`` means wait indefinitely.
    """

    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float | None = 60.0
    stream_idle_timeout_seconds: float | None = None

    def to_httpx(self) -> httpx.Timeout:
        """Build the ``httpx.Timeout`` used by pooled clients.

        Reads are left unbounded at the transport level; streaming reads are
        bounded by the relay's idle timeout instead.
        """
        return httpx.Timeout(None, connect=self.connect_timeout_seconds)


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None
_ENV_NAMES = (
    "COACHBOT_TIMEOUT_CONNECT_SECONDS",
    "COACHBOT_TIMEOUT_READ_SECONDS",
    "COACHBOT_STREAM_IDLE_TIMEOUT_SECONDS",
)


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse an environment variable as a positive float with a fallback default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return process-cached `TimeoutConfig` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    cur_guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == cur_guard:
        return _CACHED

    defaults = TimeoutConfig()
    connect = _parse_env_float("COACHBOT_TIMEOUT_CONNECT_SECONDS", defaults.connect_timeout_seconds)
    read = _parse_env_float("COACHBOT_TIMEOUT_READ_SECONDS", defaults.read_timeout_seconds)
    idle = _parse_env_float("COACHBOT_STREAM_IDLE_TIMEOUT_SECONDS", None)

    _CACHED = TimeoutConfig(
        connect_timeout_seconds=float(connect),
        read_timeout_seconds=read,
        stream_idle_timeout_seconds=idle,
    )
    _ENV_GUARD = cur_guard
    return _CACHED


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
]
