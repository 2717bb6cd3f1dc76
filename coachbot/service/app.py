from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from coachbot.base.dto import JournalSaveBody, ProfileBody
from coachbot.base.errors import PersistenceError, UnsupportedProviderError
from coachbot.base.http import aclose_all_clients
from coachbot.base.logging import get_logger
from coachbot.config import Settings, get_settings
from coachbot.config.defaults import DEFAULT_DAY, DEFAULT_JOURNAL_READ_LIMIT, SERVER_ERROR_TEXT
from coachbot.persistence.interfaces.repos import JournalEntry
from coachbot.persistence.journal_store import JournalStore, ProfileStore

from .chat_stream import router as chat_router
from .helpers import get_journal_store, get_profile_store, get_user_id, request_context

_logger = get_logger("service.app")
_APP: Optional[FastAPI] = None


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await aclose_all_clients()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the service application.

    The journal and profile stores are created here, once per application,
    and shared by every request through ``app.state``.
    """
    settings = settings or get_settings()
    app = FastAPI(title="CoachBot Service", version="0.1.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.journal = JournalStore(settings.db_path)
    app.state.profiles = ProfileStore(settings.db_path)

    # -----------------------------------------------------------------------
    # CORS configuration
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Error translation (non-streaming routes)
    # -----------------------------------------------------------------------
    @app.exception_handler(PersistenceError)
    async def _persistence_failed(_request: Request, exc: PersistenceError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": SERVER_ERROR_TEXT, "detail": exc.message})

    @app.exception_handler(UnsupportedProviderError)
    async def _unsupported(_request: Request, exc: UnsupportedProviderError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.message})

    # -----------------------------------------------------------------------
    # Journal endpoints
    # -----------------------------------------------------------------------
    @app.get("/api/journal")
    async def get_journal(
        day: int = Query(default=DEFAULT_DAY, ge=1),
        limit: int = Query(default=DEFAULT_JOURNAL_READ_LIMIT, ge=1),
        user_id: str = Depends(get_user_id),
        journal: JournalStore = Depends(get_journal_store),
    ) -> List[Dict[str, Any]]:
        """Return the day's entries oldest first, capped to the newest ``limit``."""
        entries = await journal.read(user_id, day, limit)
        return [e.to_wire() for e in entries]

    @app.post("/api/journal/save")
    async def post_journal_save(
        body: JournalSaveBody,
        user_id: str = Depends(get_user_id),
        journal: JournalStore = Depends(get_journal_store),
    ) -> Dict[str, Any]:
        """Manually append one entry to the day's log."""
        ctx = request_context(user_id, body.day)
        await journal.append(user_id, body.day, JournalEntry.create(body.role, body.message), ctx=ctx)
        return {"success": True}

    # -----------------------------------------------------------------------
    # Profile endpoints
    # -----------------------------------------------------------------------
    @app.get("/api/meta")
    async def get_meta(
        user_id: str = Depends(get_user_id),
        profiles: ProfileStore = Depends(get_profile_store),
    ) -> Dict[str, Any]:
        profile = await profiles.get(user_id)
        return profile.to_wire()

    @app.post("/api/meta")
    async def post_meta(
        body: ProfileBody,
        user_id: str = Depends(get_user_id),
        profiles: ProfileStore = Depends(get_profile_store),
    ) -> Dict[str, Any]:
        """Administrative edit: explicit values replace the stored ones."""
        profile = await profiles.overwrite(
            user_id, name=body.name, style=body.style, ctx=request_context(user_id)
        )
        return {"success": True, "meta": profile.to_wire()}

    app.include_router(chat_router)
    _logger.debug("app created db_path=%s", settings.db_path)
    return app


def get_app() -> FastAPI:
    """Return the process-wide application, creating it on first use."""
    global _APP
    if _APP is None:
        _APP = create_app()
    return _APP


__all__ = ["create_app", "get_app"]
