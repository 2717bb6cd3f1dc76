"""Per-session cancellation token.

The relay emitter cancels the token when the caller goes away; the upstream
read loop in ``normalize_upstream`` polls it between chunks and returns,
which closes the upstream response.
"""

from __future__ import annotations

import time

from .state import State


class CancellationToken:
    """Cooperative, one-shot cancellation flag for a single chat session.

    Polled on the event loop that owns the session; ``cancel`` is idempotent
    and only the first reason is kept.
    """

    def __init__(self) -> None:
        self._state = State()

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    @property
    def cancelled_at(self) -> float | None:
        """Monotonic timestamp of the first ``cancel`` call."""
        return self._state.cancelled_at

    def cancel(self, reason: str | None = None) -> None:
        if self._state.cancelled:
            return
        self._state.cancelled = True
        self._state.reason = reason
        self._state.cancelled_at = time.monotonic()

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken"]
