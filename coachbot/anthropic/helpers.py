"""Anthropic helpers module.

Purpose:
- Side-effect-free request construction for the Messages API, kept out of
  ``client.py``.
"""

from __future__ import annotations

from typing import Any, Dict

from ..config.defaults import ANTHROPIC_API_VERSION


def build_headers(api_key: str) -> Dict[str, str]:
    """Return the Messages API headers for ``api_key``."""
    return {
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_API_VERSION,
        "content-type": "application/json",
        "accept": "text/event-stream",
    }


def build_params(
    model: str,
    system_message: str,
    user_content: str,
    *,
    max_tokens: int,
    temperature: float,
) -> Dict[str, Any]:
    """Build the streaming ``/messages`` body.

    The system prompt travels in the top-level ``system`` field; the turn is
    a single user message.
    """
    return {
        "model": model,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "stream": True,
        "system": system_message,
        "messages": [{"role": "user", "content": user_content}],
    }
