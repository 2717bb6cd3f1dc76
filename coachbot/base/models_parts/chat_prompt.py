"""
Chat prompt pair.

The assembled system and user prompts for one turn, together with the
conversation day they were built for.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChatPrompt:
    system: str
    user: str
    day: int = 1


__all__ = ["ChatPrompt"]
