"""OpenAI chat-completions helpers.

Request body construction and stream-chunk translation for
``POST {base_url}/chat/completions`` with ``stream: true``.

Chunk shapes handled::

    {"choices": [{"delta": {"content": "..."}, "finish_reason": null}]}
    {"error": {"message": "...", "type": "..."}}

The ``[DONE]`` sentinel is handled by the frame decoder, not here. A
``finish_reason`` is not treated as end of stream since usage chunks may
still follow it.
"""

from __future__ import annotations

from typing import Any, Dict

from ..base.errors import ErrorCode
from ..base.streaming.events import IGNORE, DeltaResult, ErrorEvent, text_or_ignore


def build_headers(api_key: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "content-type": "application/json",
        "accept": "text/event-stream",
    }


def build_params(
    model: str,
    system_message: str,
    user_content: str,
    *,
    max_tokens: int,
    temperature: float,
) -> Dict[str, Any]:
    return {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "stream": True,
        "messages": [
            {"role": "system", "content": system_message},
            {"role": "user", "content": user_content},
        ],
    }


def translate_chunk(payload: Any) -> DeltaResult:  # noqa: ANN401 - decoded JSON
    """Map one chat-completions stream chunk to a canonical event."""
    if not isinstance(payload, dict):
        return IGNORE
    err = payload.get("error")
    if err:
        message = err.get("message") if isinstance(err, dict) else err
        return ErrorEvent(message=str(message or "openai stream error"), code=ErrorCode.SERVER_ERROR)
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return IGNORE
    first = choices[0]
    delta = first.get("delta") if isinstance(first, dict) else None
    if not isinstance(delta, dict):
        return IGNORE
    return text_or_ignore(delta.get("content"))


__all__ = ["build_headers", "build_params", "translate_chunk"]
