"""FastAPI dependencies shared by the service routes.

Identity is established by an upstream credential layer and forwarded in the
``X-User-ID`` header; requests without it act as the single anonymous user.
Stores and settings are created once per application and read from
``app.state``.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Header, Request

from ..base.logging import LogContext
from ..config import Settings
from ..config.defaults import ANONYMOUS_USER_ID
from ..persistence.journal_store import JournalStore, ProfileStore

USER_ID_HEADER = "X-User-ID"
REQUEST_ID_HEADER = "X-Request-ID"


def get_user_id(x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER)) -> str:
    return (x_user_id or "").strip() or ANONYMOUS_USER_ID


def get_request_id(x_request_id: Optional[str] = Header(default=None, alias=REQUEST_ID_HEADER)) -> str:
    return (x_request_id or "").strip() or uuid.uuid4().hex


def get_journal_store(request: Request) -> JournalStore:
    return request.app.state.journal


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profiles


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def request_context(user_id: str, day: Optional[int] = None, *, request_id: Optional[str] = None) -> LogContext:
    return LogContext(user_id=user_id, day=day, request_id=request_id)


__all__ = [
    "USER_ID_HEADER",
    "REQUEST_ID_HEADER",
    "get_user_id",
    "get_request_id",
    "get_journal_store",
    "get_profile_store",
    "get_app_settings",
    "request_context",
]
