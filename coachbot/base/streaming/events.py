"""Canonical stream events.

Every vendor protocol is normalized into the same tagged variant before it
reaches the relay or the reply accumulator:

* :class:`TextEvent` - a non-empty fragment of generated text.
* :class:`ErrorEvent` - a failure to forward to the caller; ends the session.
* :class:`EndEvent` - normal end of the upstream stream.

:data:`IGNORE` is the adapter-level "nothing to emit" marker for empty,
unrecognized or malformed frames. It never leaves the normalizer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Union

from ..errors import ErrorCode


@dataclass(frozen=True)
class TextEvent:
    text: str

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("TextEvent requires non-empty text")


@dataclass(frozen=True)
class ErrorEvent:
    message: str
    code: ErrorCode = ErrorCode.UNKNOWN


@dataclass(frozen=True)
class EndEvent:
    pass


class _Ignore:
    """Singleton marker returned for frames that carry nothing to emit."""

    _instance: "_Ignore | None" = None

    def __new__(cls) -> "_Ignore":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return "IGNORE"

    def __bool__(self) -> bool:
        return False


IGNORE: Final = _Ignore()
END: Final = EndEvent()

StreamEvent = Union[TextEvent, ErrorEvent, EndEvent]
DeltaResult = Union[TextEvent, ErrorEvent, EndEvent, _Ignore]


def text_or_ignore(value: object) -> DeltaResult:
    """Wrap ``value`` as a :class:`TextEvent` when it is a non-empty string."""
    if isinstance(value, str) and value:
        return TextEvent(value)
    return IGNORE


def is_terminal(event: StreamEvent) -> bool:
    """Return True for events after which nothing else is relayed."""
    return isinstance(event, (ErrorEvent, EndEvent))


__all__ = [
    "TextEvent",
    "ErrorEvent",
    "EndEvent",
    "IGNORE",
    "END",
    "StreamEvent",
    "DeltaResult",
    "text_or_ignore",
    "is_terminal",
]
