"""Anthropic streaming helpers.

Purpose:
- Map one decoded Messages API server-sent event to a canonical event,
  keeping ``client.py`` limited to request construction.

Frame shapes handled::

    {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "..."}}
    {"type": "error", "error": {"type": "overloaded_error", "message": "..."}}
    {"type": "message_stop"}

Everything else (``message_start``, ``ping``, ``content_block_start``, ...)
is ignored.
"""

from __future__ import annotations

from typing import Any

from ..base.errors import ErrorCode
from ..base.streaming.events import END, IGNORE, DeltaResult, ErrorEvent, text_or_ignore


def translate_stream_frame(payload: Any) -> DeltaResult:  # noqa: ANN401 - decoded JSON
    """Map an Anthropic stream event to a canonical event."""
    if not isinstance(payload, dict):
        return IGNORE
    evt_type = payload.get("type")
    if evt_type == "content_block_delta":
        delta = payload.get("delta")
        if isinstance(delta, dict) and delta.get("type") == "text_delta":
            return text_or_ignore(delta.get("text"))
        return IGNORE
    if evt_type == "message_stop":
        return END
    if evt_type == "error":
        err = payload.get("error")
        message = err.get("message") if isinstance(err, dict) else None
        return ErrorEvent(message=str(message or "anthropic stream error"), code=ErrorCode.SERVER_ERROR)
    return IGNORE


__all__ = ["translate_stream_frame"]
