"""Delta normalization: upstream bytes to canonical events.

Two layers:

* :class:`DeltaNormalizer` is synchronous and network-free. It owns the
  :class:`IncrementalFrameDecoder` and applies the active adapter's
  ``extract_delta`` to each decoded line, producing at most one event per
  line in arrival order. Undecodable payloads are recorded and skipped.
* :func:`normalize_upstream` opens the upstream call described by an
  :class:`UpstreamRequest` on a pooled ``httpx.AsyncClient`` and drives the
  normalizer chunk by chunk. Every failure becomes an in-band
  :class:`ErrorEvent`; exceptions never escape to the relay.

Lifecycle
---------
The upstream response is opened in an ``async with`` block, so leaving the
generator early (cancellation token set, caller disconnect, ``aclose`` by
the relay) closes the connection.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, AsyncIterator, Callable, List, Optional

import httpx

from ..cancellation import CancellationToken
from ..errors import (
    CoachbotError,
    ErrorCode,
    UpstreamDecodeAnomaly,
    UpstreamUnavailableError,
    classify_exception,
    status_to_code,
)
from ..http import get_httpx_client
from ..logging import LogContext, get_logger, log_event
from ..timeouts import get_timeout_config
from .events import END, IGNORE, EndEvent, ErrorEvent, StreamEvent, TextEvent, is_terminal
from .frame_decoder import IncrementalFrameDecoder, parse_data_line
from .streaming_metrics import StreamMetrics

if TYPE_CHECKING:
    from ..interfaces import ProviderAdapter
    from ..models import UpstreamRequest

_logger = get_logger("streaming.normalizer")

_ERROR_DETAIL_LIMIT = 300


class DeltaNormalizer:
    """Turn raw upstream chunks into canonical events for one adapter."""

    def __init__(
        self,
        adapter: "ProviderAdapter",
        *,
        on_anomaly: Optional[Callable[[UpstreamDecodeAnomaly], None]] = None,
    ) -> None:
        self.adapter = adapter
        self.anomalies: List[UpstreamDecodeAnomaly] = []
        self.done = False
        self._decoder = IncrementalFrameDecoder()
        self._on_anomaly = on_anomaly

    def feed(self, chunk: bytes) -> List[StreamEvent]:
        return self._normalize_lines(self._decoder.feed(chunk))

    def finish(self) -> List[StreamEvent]:
        """Flush the decoder at end of input."""
        return self._normalize_lines(self._decoder.flush())

    def normalize_line(self, line: str) -> Optional[StreamEvent]:
        """Map one decoded line to an event, or ``None`` when nothing is emitted.

        Once a terminal event has been produced, later lines are ignored.
        """
        if self.done:
            return None
        parsed = parse_data_line(line)
        if parsed is None:
            return None
        if isinstance(parsed, EndEvent):
            self.done = True
            return END
        if isinstance(parsed, UpstreamDecodeAnomaly):
            self.anomalies.append(parsed)
            if self._on_anomaly is not None:
                self._on_anomaly(parsed)
            return None
        result = self.adapter.extract_delta(parsed.payload)
        if result is IGNORE:
            return None
        if is_terminal(result):
            self.done = True
        return result

    def _normalize_lines(self, lines: List[str]) -> List[StreamEvent]:
        out: List[StreamEvent] = []
        for line in lines:
            evt = self.normalize_line(line)
            if evt is not None:
                out.append(evt)
        return out


def _describe_failure(status: int, body: bytes) -> str:
    detail = ""
    try:
        data = json.loads(body.decode("utf-8", errors="replace"))
    except ValueError:
        detail = body.decode("utf-8", errors="replace").strip()
    else:
        err = data.get("error") if isinstance(data, dict) else None
        if isinstance(err, dict):
            detail = str(err.get("message") or "")
        elif isinstance(err, str):
            detail = err
    detail = detail[:_ERROR_DETAIL_LIMIT]
    return f"upstream returned HTTP {status}" + (f": {detail}" if detail else "")


def _error_event(exc: BaseException, provider: str) -> ErrorEvent:
    if isinstance(exc, CoachbotError):
        return ErrorEvent(message=exc.message, code=exc.code)
    code = classify_exception(exc)
    return ErrorEvent(message=f"{provider} upstream failure: {type(exc).__name__}", code=code)


def _check_status(response: httpx.Response, body: bytes, provider: str) -> None:
    if response.status_code >= 400:
        raise UpstreamUnavailableError(
            message=_describe_failure(response.status_code, body),
            code=status_to_code(response.status_code),
            provider=provider,
            status=response.status_code,
        )


async def _next_chunk(
    chunks: AsyncIterator[bytes], idle_timeout: Optional[float]
) -> Optional[bytes]:
    try:
        if idle_timeout is None:
            return await chunks.__anext__()
        return await asyncio.wait_for(chunks.__anext__(), timeout=idle_timeout)
    except StopAsyncIteration:
        return None


async def normalize_upstream(
    adapter: "ProviderAdapter",
    request: "UpstreamRequest",
    *,
    token: Optional[CancellationToken] = None,
    ctx: Optional[LogContext] = None,
    metrics: Optional[StreamMetrics] = None,
    idle_timeout: Optional[float] = None,
) -> AsyncIterator[StreamEvent]:
    """Yield canonical events for one upstream call.

    Yields zero or more :class:`TextEvent` followed by exactly one terminal
    event (:class:`ErrorEvent` or :class:`EndEvent`). When ``token`` is
    cancelled the generator returns without a terminal event and the
    upstream response is closed.
    """
    metrics = metrics if metrics is not None else StreamMetrics()
    provider = adapter.name
    client = get_httpx_client(None, "stream" if request.stream else "chat")

    def _anomaly(a: UpstreamDecodeAnomaly) -> None:
        metrics.anomalies += 1
        log_event(
            _logger,
            "stream.decode_anomaly",
            ctx,
            level=logging.DEBUG,
            reason=a.reason,
            payload=a.payload[:_ERROR_DETAIL_LIMIT],
        )

    try:
        if not request.stream:
            async for evt in _single_body(adapter, request, client):
                yield evt
            return

        normalizer = DeltaNormalizer(adapter, on_anomaly=_anomaly)
        async with client.stream(
            request.method, request.url, headers=request.headers, json=request.body
        ) as response:
            if response.status_code >= 400:
                _check_status(response, await response.aread(), provider)
            chunks = response.aiter_bytes().__aiter__()
            while True:
                if token is not None and token.cancelled:
                    return
                chunk = await _next_chunk(chunks, idle_timeout)
                if chunk is None:
                    break
                for evt in normalizer.feed(chunk):
                    yield evt
                    if is_terminal(evt):
                        return
                    if token is not None and token.cancelled:
                        return
            for evt in normalizer.finish():
                yield evt
                if is_terminal(evt):
                    return
        # Upstream closed without a terminator frame.
        yield END
    except asyncio.TimeoutError:
        log_event(_logger, "stream.idle_timeout", ctx, level=logging.WARNING, idle_timeout_s=idle_timeout)
        yield ErrorEvent(message=f"{provider} upstream idle timeout", code=ErrorCode.TIMEOUT)
    except (CoachbotError, httpx.HTTPError) as e:
        evt = _error_event(e, provider)
        log_event(
            _logger,
            "stream.upstream_error",
            ctx,
            level=logging.WARNING,
            code=evt.code.value,
            error=evt.message,
            status=getattr(e, "status", None),
        )
        yield evt


async def _single_body(
    adapter: "ProviderAdapter", request: "UpstreamRequest", client: httpx.AsyncClient
) -> AsyncIterator[StreamEvent]:
    cfg = get_timeout_config()
    response = await client.request(
        request.method,
        request.url,
        headers=request.headers,
        json=request.body,
        timeout=httpx.Timeout(cfg.read_timeout_seconds, connect=cfg.connect_timeout_seconds),
    )
    _check_status(response, response.content, adapter.name)
    try:
        payload = response.json()
    except ValueError as e:
        raise UpstreamUnavailableError(
            message=f"{adapter.name} returned an unreadable response body",
            provider=adapter.name,
            status=response.status_code,
            raw=e,
        ) from e
    result = adapter.extract_delta(payload)
    if isinstance(result, (TextEvent, ErrorEvent)):
        yield result
        if isinstance(result, ErrorEvent):
            return
    yield END


__all__ = ["DeltaNormalizer", "normalize_upstream"]
