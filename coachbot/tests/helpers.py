"""Shared fakes for upstream vendors and log inspection.

``FakeUpstream`` is installed as an ``httpx.MockTransport`` handler by the
``upstream`` fixture; tests configure its next response with ``sse`` /
``json`` / ``respond``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional

import httpx


def sse_bytes(*payloads: Any, done: bool = True) -> bytes:
    """Encode payloads as ``data:`` frames, optionally ending with ``[DONE]``."""
    out = "".join(f"data: {json.dumps(p, ensure_ascii=False)}\n\n" for p in payloads)
    if done:
        out += "data: [DONE]\n\n"
    return out.encode("utf-8")


def openai_chunk(text: str) -> dict:
    return {"choices": [{"index": 0, "delta": {"content": text}, "finish_reason": None}]}


def anthropic_delta(text: str) -> dict:
    return {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": text}}


def parse_frames(body: str) -> List[Any]:
    """Split an event-stream body into decoded ``data:`` payloads (``[DONE]`` kept as a string)."""
    out: List[Any] = []
    for block in body.split("\n\n"):
        if not block.startswith("data: "):
            continue
        payload = block[len("data: "):]
        out.append(payload if payload == "[DONE]" else json.loads(payload))
    return out


def events_of(records: List[logging.LogRecord]) -> List[dict]:
    """Decode ``log_event`` payloads from captured records."""
    out = []
    for r in records:
        try:
            payload = json.loads(r.getMessage())
        except ValueError:
            continue
        if isinstance(payload, dict) and "event" in payload:
            out.append(payload)
    return out


class FakeUpstream:
    """Callable handler for ``httpx.MockTransport`` that records requests."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._handler: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is None:
            return httpx.Response(500, json={"error": {"message": "no fake response configured"}})
        return self._handler(request)

    def respond(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler

    def sse(self, *payloads: Any, done: bool = True, prefix: bytes = b"") -> None:
        body = prefix + sse_bytes(*payloads, done=done)
        self.respond(
            lambda _req: httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})
        )

    def json(self, payload: Any, status: int = 200) -> None:
        self.respond(lambda _req: httpx.Response(status, json=payload))

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)
