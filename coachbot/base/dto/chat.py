"""
Pydantic DTOs and validators for inbound HTTP bodies.

Purpose
-------
Validate caller payloads at the controller edge before they reach the
relay, the journal or the profile store.

External dependencies: Pydantic only (no network calls).

Fallback semantics: Not applicable. Validation either succeeds or raises a
``pydantic.ValidationError``; FastAPI turns it into a 422 response.
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ...config.defaults import DEFAULT_DAY, DEFAULT_PROVIDER
from ...persistence.interfaces.repos import normalize_role
from ..utils.heuristics import STYLE_TAGS


class ChatStreamBody(BaseModel):
    """Body of ``POST /api/chat`` and ``POST /api/chat/stream``.

    ``provider`` is kept as free text: an unknown vendor is reported in-band
    by the relay, not rejected by validation.
    """

    message: str = Field(..., min_length=1)
    day: int = Field(default=DEFAULT_DAY, ge=1)
    provider: str = DEFAULT_PROVIDER


class JournalSaveBody(BaseModel):
    """Body of ``POST /api/journal/save`` (manual save)."""

    day: int = Field(default=DEFAULT_DAY, ge=1)
    message: str = ""
    role: str = "user"

    @field_validator("role")
    @classmethod
    def _normalize_role(cls, v: str) -> str:
        return normalize_role(v)


class ProfileBody(BaseModel):
    """Body of ``POST /api/meta``; ``disc`` is accepted as an alias of ``style``."""

    name: Optional[str] = None
    style: Optional[str] = Field(default=None, validation_alias=AliasChoices("style", "disc"))

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @field_validator("style")
    @classmethod
    def _check_style(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        tag = v.strip().upper()
        if tag not in STYLE_TAGS:
            raise ValueError(f"style must be one of {', '.join(STYLE_TAGS)}")
        return tag


__all__ = ["ChatStreamBody", "JournalSaveBody", "ProfileBody"]
