"""coachbot.config.env
===================

Centralized environment variable mapping and helpers for upstream vendor
credentials.

Purpose
-------
- Provide a single source of truth for mapping vendor identifiers to their
  API key environment variable names (canonical and aliases).
- Offer small lookup helpers used by ``get_provider_config``.

Design Notes
------------
- Canonical mapping is defined in ``ENV_MAP``. Gemini historically accepts
  two variable names; those are listed in ``ENV_ALIASES`` with the canonical
  name first to establish precedence.
- How keys get into the environment is out of scope; this module only reads.

Failure Modes
-------------
- Functions return ``None`` when a vendor is unknown or no value is present.
  Callers decide how to surface the missing credential (the adapters raise
  ``UpstreamUnavailableError`` at stream-open time).
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Optional, Tuple

# Canonical vendor → env var mapping
ENV_MAP: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


# Vendor → ordered tuple of acceptable env var names (canonical first)
ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the provided string looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_'. The check is case-insensitive and resilient to surrounding spaces.
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return (
        "placeholder" in v
        or "changeme" in v
        or "example" in v
        or v.startswith("test_")
    )


def get_env_var_candidates(provider: str) -> Iterable[str]:
    """Yield acceptable environment variable names for a vendor.

    The canonical name is yielded first, followed by any aliases.
    """
    p = (provider or "").lower()
    canonical = ENV_MAP.get(p)
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(p, ()):  # pragma: no branch - small tuples
        if alias != canonical:
            yield alias


def resolve_provider_key(provider: str) -> Tuple[Optional[str], Optional[str]]:
    """Resolve an API key for a vendor from the process environment.

    Returns
    -------
    Tuple[Optional[str], Optional[str]]
        ``(value, env_var_used)`` for the first non-empty, non-placeholder
        value; ``(None, None)`` when nothing usable is set.
    """
    for name in get_env_var_candidates(provider):
        val = os.environ.get(name, "").strip()
        if val and not is_placeholder(val):
            return val, name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
]
