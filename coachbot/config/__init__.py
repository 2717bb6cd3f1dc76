"""Unified configuration layer for coachbot.

Goals
-----
* Centralize defaults (models, base URLs, storage paths, prompts).
* Merge vendor settings in a predictable order:
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``COACHBOT_CONFIG_FILE``
    3. Environment variables (e.g. ``OPENAI_MODEL``, ``ANTHROPIC_BASE_URL``)
    4. API key resolved from the environment (``config.env``)
    5. In-code overrides passed to the helper
* Expose service settings (database path, prompt file, CORS origins, day
  plans) through one cached :class:`Settings` snapshot.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML via PyYAML. Structure example::

    anthropic:
      model: claude-3-5-sonnet-20241022
    openai:
      base_url: https://api.openai.com/v1
    day_plans:
      1: "Jour 1 : Clarification des intentions"
      2: "Jour 2 : Diagnostic de la situation actuelle"

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_settings() -> Settings
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    ANTHROPIC_DEFAULT_MODEL,
    COACHBOT_DEFAULT_CORS_ORIGINS,
    DEFAULT_DB_FILENAME,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GEMINI_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_MODEL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
)
from .env import resolve_provider_key


# -------------------- Defaults --------------------

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "anthropic": {
        "model": ANTHROPIC_DEFAULT_MODEL,
        "base_url": ANTHROPIC_DEFAULT_BASE_URL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "temperature": DEFAULT_TEMPERATURE,
    },
    "openai": {
        "model": OPENAI_DEFAULT_MODEL,
        "base_url": OPENAI_DEFAULT_BASE_URL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "temperature": DEFAULT_TEMPERATURE,
    },
    "gemini": {
        "model": GEMINI_DEFAULT_MODEL,
        "base_url": GEMINI_DEFAULT_BASE_URL,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "temperature": DEFAULT_TEMPERATURE,
    },
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "base_url": "BASE_URL",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None
_SETTINGS_CACHE: Optional["Settings"] = None


@dataclass(frozen=True)
class Settings:
    """Service-level settings snapshot.

    Attributes:
        db_path: SQLite file backing the journal and profiles.
        prompt_path: Optional text file holding the base system prompt.
        cors_origins: Origins allowed by the CORS middleware.
        day_plans: Day number → plan text, supplied by the config file.
    """

    db_path: str
    prompt_path: Optional[str] = None
    cors_origins: Tuple[str, ...] = ()
    day_plans: Dict[int, str] = field(default_factory=dict)


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("COACHBOT_CONFIG_FILE")
    if not path:
        _FILE_CACHE = {}
        return _FILE_CACHE
    p = Path(path)
    if not p.exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = p.read_text(encoding="utf-8")
    data: Any
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = provider.upper()
    for field_name, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val:
            out[field_name] = val
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a vendor.

    Merge order (later wins): defaults -> external config -> env vars -> env key -> overrides
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if not cfg.get("api_key"):
        key, _env_name = resolve_provider_key(name)
        if key:
            cfg["api_key"] = key

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def _parse_day_plans(raw: Any) -> Dict[int, str]:
    plans: Dict[int, str] = {}
    if not isinstance(raw, dict):
        return plans
    for key, value in raw.items():
        try:
            day = int(key)
        except (TypeError, ValueError):
            continue
        if isinstance(value, str) and value.strip():
            plans[day] = value.strip()
    return plans


def get_settings() -> Settings:
    """Return the process-cached service settings.

    Environment variables:
        COACHBOT_DB_PATH, COACHBOT_PROMPT_PATH, COACHBOT_CORS_ORIGINS
    """
    global _SETTINGS_CACHE
    if _SETTINGS_CACHE is not None:
        return _SETTINGS_CACHE
    file_cfg = _load_external_config()
    db_path = os.getenv("COACHBOT_DB_PATH") or str(Path.cwd() / DEFAULT_DB_FILENAME)
    prompt_path = os.getenv("COACHBOT_PROMPT_PATH") or None
    origins_raw = os.getenv("COACHBOT_CORS_ORIGINS", COACHBOT_DEFAULT_CORS_ORIGINS)
    origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())
    _SETTINGS_CACHE = Settings(
        db_path=db_path,
        prompt_path=prompt_path,
        cors_origins=origins,
        day_plans=_parse_day_plans(file_cfg.get("day_plans")),
    )
    return _SETTINGS_CACHE


def reset_config_cache() -> None:
    """Forget cached file contents and settings (tests, config reloads)."""
    global _FILE_CACHE, _SETTINGS_CACHE
    _FILE_CACHE = None
    _SETTINGS_CACHE = None


__all__ = [
    "DEFAULTS",
    "Settings",
    "get_provider_config",
    "get_settings",
    "reset_config_cache",
]
