"""Prompt assembly for one coaching turn."""
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from ...config.defaults import DEFAULT_SYSTEM_PROMPT, UNKNOWN_PLAN_TEXT

CONTEXT_REMINDERS = (
    "Rappels: réponses courtes, concrètes, micro‑action 10 min, critère de réussite, tutoiement."
)


def load_base_prompt(path: Optional[str]) -> str:
    """Read the base system prompt from ``path``; fall back to the built-in text."""
    if not path:
        return DEFAULT_SYSTEM_PROMPT
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError:
        return DEFAULT_SYSTEM_PROMPT


def system_prompt(name: Optional[str], style: Optional[str], base_text: Optional[str] = None) -> str:
    """Base prompt followed by the caller's known profile."""
    base = DEFAULT_SYSTEM_PROMPT if base_text is None else base_text
    note = (
        "\n\n[Contexte CoachBot]\n"
        f"Prénom: {name or 'Inconnu'}\n"
        f"DISC: {style or 'À déduire'}\n"
        f"{CONTEXT_REMINDERS}"
    )
    return base + note


def user_prompt(day: int, message: str, plans: Optional[Mapping[int, str]] = None) -> str:
    """Day plan followed by the user's message."""
    plan = (plans or {}).get(int(day)) or UNKNOWN_PLAN_TEXT
    return f"Plan du jour ({day}) : {plan}\n\nMessage de l'utilisateur : {message}"


__all__ = ["CONTEXT_REMINDERS", "load_base_prompt", "system_prompt", "user_prompt"]
