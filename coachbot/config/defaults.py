"""coachbot.config.defaults
=======================

Central place for small, stable default values used across the coachbot
package and its HTTP service layer. These defaults can be overridden via
environment variables or the optional config file, but provide sensible
fallbacks for local development and tests.

Module Purpose
--------------
- Provide a single import location for conservative default constants (no I/O).
- Keep the service and adapter layers free of magic literals.

This module intentionally avoids importing from other coachbot packages to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Service / HTTP layer ----

# Comma-separated list of allowed origins for the browser client.
COACHBOT_DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
# Identity used when the credential layer did not forward an X-User-ID header.
ANONYMOUS_USER_ID = "anonymous"
DEFAULT_PROVIDER = "anthropic"
DEFAULT_DAY = 1


# ---- Vendor defaults ----
ANTHROPIC_DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
ANTHROPIC_API_VERSION = "2023-06-01"

OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"

GEMINI_DEFAULT_MODEL = "gemini-1.5-flash"
GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Sampling parameters shared by every vendor request.
DEFAULT_MAX_TOKENS = 800
DEFAULT_TEMPERATURE = 0.4


# ---- Prompts ----
DEFAULT_SYSTEM_PROMPT = (
    "Tu es CoachBot. Réponds en français, de façon brève, concrète, en tutoyant."
)
UNKNOWN_PLAN_TEXT = "Plan non spécifié."
FALLBACK_REPLY_TEXT = "Je n’ai pas compris, peux-tu reformuler ?"
SERVER_ERROR_TEXT = "Erreur serveur"


# ---- Journal ----
DEFAULT_JOURNAL_READ_LIMIT = 200
DEFAULT_DB_FILENAME = "coachbot.db"


# ---- SQLite config (infrastructure) ----
# Standard busy timeout to mitigate lock contention (milliseconds).
SQLITE_BUSY_TIMEOUT_MS = 5000
SQLITE_JOURNAL_MODE = "WAL"
SQLITE_SYNCHRONOUS = "NORMAL"


__all__ = [
    # Service
    "COACHBOT_DEFAULT_CORS_ORIGINS",
    "ANONYMOUS_USER_ID",
    "DEFAULT_PROVIDER",
    "DEFAULT_DAY",
    # Vendors
    "ANTHROPIC_DEFAULT_MODEL",
    "ANTHROPIC_DEFAULT_BASE_URL",
    "ANTHROPIC_API_VERSION",
    "OPENAI_DEFAULT_MODEL",
    "OPENAI_DEFAULT_BASE_URL",
    "GEMINI_DEFAULT_MODEL",
    "GEMINI_DEFAULT_BASE_URL",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    # Prompts
    "DEFAULT_SYSTEM_PROMPT",
    "UNKNOWN_PLAN_TEXT",
    "FALLBACK_REPLY_TEXT",
    "SERVER_ERROR_TEXT",
    # Journal
    "DEFAULT_JOURNAL_READ_LIMIT",
    "DEFAULT_DB_FILENAME",
    # SQLite
    "SQLITE_BUSY_TIMEOUT_MS",
    "SQLITE_JOURNAL_MODE",
    "SQLITE_SYNCHRONOUS",
]
