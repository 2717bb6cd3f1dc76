"""Reply accumulation over canonical stream events.

``accumulate`` is a pure reduction: it returns a new :class:`ReplyState` for
each event and never touches anything else. :class:`ReplyAccumulator` is a
thin holder used by the relay so the accumulator and the emitter observe the
same events in lock-step.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..errors import ErrorCode
from .events import EndEvent, ErrorEvent, StreamEvent, TextEvent


@dataclass(frozen=True)
class ReplyState:
    text: str = ""
    finished: bool = False
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def accumulate(state: ReplyState, event: StreamEvent) -> ReplyState:
    """Fold one event into ``state``. Events after finalization are ignored."""
    if state.finished:
        return state
    if isinstance(event, TextEvent):
        return replace(state, text=state.text + event.text)
    if isinstance(event, ErrorEvent):
        return replace(state, finished=True, error=event.message, error_code=event.code)
    if isinstance(event, EndEvent):
        return replace(state, finished=True)
    return state


def accumulate_all(events: Iterable[StreamEvent]) -> ReplyState:
    state = ReplyState()
    for evt in events:
        state = accumulate(state, evt)
    return state


class ReplyAccumulator:
    """Stateful wrapper around :func:`accumulate` for one session."""

    def __init__(self) -> None:
        self.state = ReplyState()

    def feed(self, event: StreamEvent) -> None:
        self.state = accumulate(self.state, event)

    @property
    def text(self) -> str:
        return self.state.text

    @property
    def finished(self) -> bool:
        return self.state.finished


__all__ = ["ReplyState", "accumulate", "accumulate_all", "ReplyAccumulator"]
