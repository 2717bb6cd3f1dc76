"""Internal state holder for cancellation tokens.

Tracks whether a relay was cancelled, the reason and the monotonic time, so
teardown logging can report how long the upstream read lingered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class State:
    """Internal state for cooperative cancellation tokens."""

    cancelled: bool = False
    reason: Optional[str] = None
    cancelled_at: Optional[float] = None


__all__ = ["State"]
