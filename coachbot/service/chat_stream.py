"""
Chat routes and per-request session orchestration.

Purpose
-------
Expose ``POST /api/chat/stream`` (server-sent ``data:`` frames) and the
non-streaming ``POST /api/chat``. Both run the same :class:`StreamSession`:

1. profile heuristics fill still-unset profile fields;
2. the user entry is appended to the journal;
3. the vendor adapter is selected and the upstream request built;
4. canonical events flow through the relay and the reply accumulator;
5. a non-empty reply is appended as the assistant entry before the
   terminator frame is written.

Fallback semantics
------------------
- Unknown vendor, missing credential and upstream failures are reported
  in-band on the streaming route (one error frame, then ``[DONE]``) and as
  400 / 502 on the non-streaming route.
- A failed user-entry append happens before any frame is sent and surfaces
  as HTTP 500. A failed assistant-entry append after a successful stream is
  logged at error level and kept on ``StreamSession.persist_error``.

Timeout strategy
----------------
No server-side timeout by default. ``COACHBOT_STREAM_IDLE_TIMEOUT_SECONDS``
bounds the wait for each upstream chunk when set.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ..base.cancellation import CancellationToken
from ..base.dto import ChatStreamBody
from ..base.errors import ErrorCode, PersistenceError, UnsupportedProviderError, UpstreamUnavailableError
from ..base.factory import ProviderFactory
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import ChatPrompt
from ..base.streaming import (
    ErrorEvent,
    RelayEmitter,
    ReplyState,
    StreamEvent,
    StreamMetrics,
    normalize_upstream,
    single_error,
)
from ..base.timeouts import get_timeout_config
from ..base.utils.heuristics import apply_heuristics
from ..base.utils.prompts import load_base_prompt, system_prompt, user_prompt
from ..config import Settings
from ..config.defaults import FALLBACK_REPLY_TEXT
from ..persistence.interfaces.repos import JournalEntry
from ..persistence.journal_store import JournalStore, ProfileStore
from .helpers import (
    get_app_settings,
    get_journal_store,
    get_profile_store,
    get_request_id,
    get_user_id,
    request_context,
)

router = APIRouter()
_logger = get_logger("service.chat")

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class StreamSession:
    """State owned by one chat request; never shared across requests."""

    def __init__(
        self,
        *,
        user_id: str,
        body: ChatStreamBody,
        journal: JournalStore,
        profiles: ProfileStore,
        settings: Settings,
        ctx: Optional[LogContext] = None,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
        fallback_reply: Optional[str] = None,
    ) -> None:
        self.user_id = user_id
        self.body = body
        self.journal = journal
        self.profiles = profiles
        self.settings = settings
        self.ctx = ctx or request_context(user_id, body.day)
        self.ctx.provider = body.provider
        self.token = CancellationToken()
        self.metrics = StreamMetrics()
        self.prompt: Optional[ChatPrompt] = None
        self.assistant_entry: Optional[JournalEntry] = None
        self.persist_error: Optional[PersistenceError] = None
        self._is_disconnected = is_disconnected
        self._fallback_reply = fallback_reply

    async def prepare(self) -> ChatPrompt:
        """Update the profile, record the user turn and assemble the prompts.

        Raises:
            PersistenceError: When the profile or the user entry cannot be stored.
        """
        message = self.body.message
        profile = await self.profiles.get(self.user_id)
        update = apply_heuristics(message, name=profile.name, style=profile.style)
        if not update.empty:
            profile = await self.profiles.apply(self.user_id, update, ctx=self.ctx)
        await self.journal.append(self.user_id, self.body.day, JournalEntry.create("user", message), ctx=self.ctx)
        base_prompt = await asyncio.to_thread(load_base_prompt, self.settings.prompt_path)
        self.prompt = ChatPrompt(
            system=system_prompt(profile.name, profile.style, base_prompt),
            user=user_prompt(self.body.day, message, self.settings.day_plans),
            day=self.body.day,
        )
        return self.prompt

    def events(self) -> AsyncIterator[StreamEvent]:
        """Select the adapter and return the canonical event source."""
        prompt = self.prompt or ChatPrompt(system="", user=self.body.message, day=self.body.day)
        try:
            adapter = ProviderFactory.create(self.body.provider)
            self.ctx.provider, self.ctx.model = adapter.name, adapter.model
            request = adapter.build_request(prompt.system, prompt.user, prompt.day)
        except (UnsupportedProviderError, UpstreamUnavailableError) as e:
            log_event(
                _logger,
                "stream.upstream_error",
                self.ctx,
                level=logging.WARNING,
                code=e.code.value,
                error=e.message,
            )
            return single_error(ErrorEvent(message=e.message, code=e.code))
        return normalize_upstream(
            adapter,
            request,
            token=self.token,
            ctx=self.ctx,
            metrics=self.metrics,
            idle_timeout=get_timeout_config().stream_idle_timeout_seconds,
        )

    def relay(self) -> RelayEmitter:
        events = self.events()
        return RelayEmitter(
            events,
            token=self.token,
            is_disconnected=self._is_disconnected,
            on_finish=self._persist_reply,
            ctx=self.ctx,
            metrics=self.metrics,
        )

    async def collect(self) -> ReplyState:
        """Drain the relay without a caller channel (non-streaming route)."""
        relay = self.relay()
        async for _frame in relay.frames():
            pass
        return relay.reply

    async def _persist_reply(self, state: ReplyState) -> None:
        text = state.text
        if not text and not state.failed and self._fallback_reply:
            text = self._fallback_reply
        if not text:
            return
        try:
            self.assistant_entry = await self.journal.append(
                self.user_id, self.body.day, JournalEntry.create("assistant", text), ctx=self.ctx
            )
        except PersistenceError as e:
            # Already logged by the store as journal.persist_failed.
            self.persist_error = e


def _session(
    body: ChatStreamBody,
    user_id: str,
    request_id: str,
    journal: JournalStore,
    profiles: ProfileStore,
    settings: Settings,
    **kwargs: Any,
) -> StreamSession:
    return StreamSession(
        user_id=user_id,
        body=body,
        journal=journal,
        profiles=profiles,
        settings=settings,
        ctx=request_context(user_id, body.day, request_id=request_id),
        **kwargs,
    )


@router.post("/api/chat/stream")
async def post_chat_stream(
    request: Request,
    body: ChatStreamBody,
    user_id: str = Depends(get_user_id),
    request_id: str = Depends(get_request_id),
    journal: JournalStore = Depends(get_journal_store),
    profiles: ProfileStore = Depends(get_profile_store),
    settings: Settings = Depends(get_app_settings),
) -> StreamingResponse:
    """Relay the vendor reply as ``data: {"text": ...}`` frames ending with ``[DONE]``."""
    session = _session(
        body, user_id, request_id, journal, profiles, settings,
        is_disconnected=request.is_disconnected,
    )
    await session.prepare()
    relay = session.relay()
    return StreamingResponse(relay.frames(), media_type="text/event-stream", headers=STREAM_HEADERS)


@router.post("/api/chat")
async def post_chat(
    body: ChatStreamBody,
    user_id: str = Depends(get_user_id),
    request_id: str = Depends(get_request_id),
    journal: JournalStore = Depends(get_journal_store),
    profiles: ProfileStore = Depends(get_profile_store),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """Return the whole reply at once as ``{"reply": ...}``."""
    session = _session(
        body, user_id, request_id, journal, profiles, settings,
        fallback_reply=FALLBACK_REPLY_TEXT,
    )
    await session.prepare()
    state = await session.collect()
    if state.failed:
        status = 400 if state.error_code == ErrorCode.UNSUPPORTED else 502
        return JSONResponse(status_code=status, content={"error": state.error})
    payload: Dict[str, Any] = {"reply": state.text or FALLBACK_REPLY_TEXT}
    return payload


__all__ = ["router", "StreamSession", "STREAM_HEADERS"]
