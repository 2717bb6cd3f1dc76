"""Relay emitter: canonical events to outbound ``data:`` frames.

Frames are yielded one event at a time so the ASGI server flushes each delta
as soon as it is produced. The outbound format is::

    data: {"text": "<delta>"}\\n\\n
    data: {"error": "<message>"}\\n\\n
    data: [DONE]\\n\\n

The terminator is always written after an end or error event. The only
case where it is not written is a caller disconnect: the relay stops
writing, cancels the session token and closes the upstream event source.

The reply accumulator sees exactly the events the caller sees, in the same
order. ``on_finish`` runs before the terminator so persistence completes
while the response is still open.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from ...config.defaults import SERVER_ERROR_TEXT
from ..cancellation import CancellationToken
from ..errors import CallerDisconnected, ErrorCode
from ..logging import LogContext, get_logger, log_event
from .accumulator import ReplyAccumulator, ReplyState
from .events import EndEvent, ErrorEvent, StreamEvent, TextEvent
from .streaming_metrics import StreamMetrics

DONE_FRAME = "data: [DONE]\n\n"

_logger = get_logger("streaming.relay")


def encode_event(event: StreamEvent) -> Optional[str]:
    """Serialize one event as an outbound frame (``None`` for end events)."""
    if isinstance(event, TextEvent):
        body = {"text": event.text}
    elif isinstance(event, ErrorEvent):
        body = {"error": event.message}
    else:
        return None
    return f"data: {json.dumps(body, ensure_ascii=False)}\n\n"


async def single_error(event: ErrorEvent) -> AsyncIterator[StreamEvent]:
    """Event source for failures detected before any upstream call."""
    yield event


class RelayEmitter:
    """Forward one session's events to the caller.

    Parameters:
        events: Canonical event source (usually ``normalize_upstream``).
        token: Session cancellation token; cancelled on caller disconnect.
        is_disconnected: Optional async probe of the caller channel, checked
            before every write.
        on_finish: Awaited with the final :class:`ReplyState` before the
            terminator is written. Not called after a caller disconnect.
    """

    def __init__(
        self,
        events: AsyncIterator[StreamEvent],
        *,
        token: Optional[CancellationToken] = None,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
        on_finish: Optional[Callable[[ReplyState], Awaitable[None]]] = None,
        ctx: Optional[LogContext] = None,
        metrics: Optional[StreamMetrics] = None,
    ) -> None:
        self._events = events
        self.token = token or CancellationToken()
        self._is_disconnected = is_disconnected
        self._on_finish = on_finish
        self._ctx = ctx
        self.metrics = metrics if metrics is not None else StreamMetrics()
        self.accumulator = ReplyAccumulator()
        self.disconnect: Optional[CallerDisconnected] = None
        self._finished = False

    @property
    def reply(self) -> ReplyState:
        return self.accumulator.state

    @property
    def disconnected(self) -> bool:
        return self.disconnect is not None

    async def frames(self) -> AsyncIterator[str]:
        """Yield outbound frames until the terminator or a caller disconnect."""
        log_event(_logger, "stream.start", self._ctx)
        try:
            async for event in self._events:
                if await self._caller_gone():
                    return
                self.accumulator.feed(event)
                if isinstance(event, TextEvent) and self.metrics.record_delta(event.text):
                    log_event(
                        _logger,
                        "stream.first_delta",
                        self._ctx,
                        time_to_first_delta_ms=round(self.metrics.time_to_first_delta_ms or 0.0, 2),
                    )
                frame = encode_event(event)
                if frame is not None:
                    yield frame
                if isinstance(event, (ErrorEvent, EndEvent)):
                    break
            if self.token.cancelled:
                self._mark_disconnected(self.token.reason or "cancelled")
                return
            if self._on_finish is not None:
                self._finished = True
                await self._on_finish(self.accumulator.state)
            yield DONE_FRAME
        except asyncio.CancelledError:
            self._mark_disconnected("task cancelled")
            raise
        except Exception as e:  # noqa: BLE001 - reported in-band, caller still gets the terminator
            log_event(
                _logger,
                "stream.upstream_error",
                self._ctx,
                level=logging.ERROR,
                code=ErrorCode.SERVER_ERROR.value,
                error=f"{type(e).__name__}: {e}",
            )
            if not self.disconnected:
                failure = ErrorEvent(message=SERVER_ERROR_TEXT, code=ErrorCode.SERVER_ERROR)
                self.accumulator.feed(failure)
                frame = encode_event(failure)
                if frame is not None:
                    yield frame
                await self._finish_after_failure()
                yield DONE_FRAME
        finally:
            await self._close_source()
            self.metrics.finalize()
            log_event(
                _logger,
                "stream.end",
                self._ctx,
                cancelled=self.disconnected,
                error=self.accumulator.state.error,
                **self.metrics.as_fields(),
            )

    async def _finish_after_failure(self) -> None:
        """Run ``on_finish`` for text already relayed; the terminator follows regardless."""
        if self._on_finish is None or self._finished:
            return
        try:
            await self._on_finish(self.accumulator.state)
        except Exception as e:  # noqa: BLE001 - terminator must still be written
            log_event(
                _logger,
                "stream.finish_failed",
                self._ctx,
                level=logging.ERROR,
                error=f"{type(e).__name__}: {e}",
            )

    async def _caller_gone(self) -> bool:
        if self.token.cancelled:
            self._mark_disconnected(self.token.reason or "cancelled")
            return True
        if self._is_disconnected is not None and await self._is_disconnected():
            self._mark_disconnected("caller disconnected")
            return True
        return False

    def _mark_disconnected(self, reason: str) -> None:
        if self.disconnect is not None:
            return
        self.disconnect = CallerDisconnected(message=reason)
        self.token.cancel(reason)
        log_event(
            _logger,
            "stream.cancelled",
            self._ctx,
            level=logging.INFO,
            code=self.disconnect.code.value,
            reason=reason,
        )

    async def _close_source(self) -> None:
        aclose = getattr(self._events, "aclose", None)
        if aclose is None:
            return
        # Closing an already-finished generator is a no-op.
        with contextlib.suppress(RuntimeError):
            await aclose()


__all__ = ["DONE_FRAME", "encode_event", "single_error", "RelayEmitter"]
