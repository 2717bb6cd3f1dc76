"""Profile metadata heuristics.

Pure, best-effort functions over one raw user message:

* :func:`extract_name` recognizes self-introductions ("je m'appelle Léa",
  "moi c'est Léa", "my name is Léa") or a message that is a single word.
* :func:`infer_style` classifies the message into one of the four DISC tags
  (``D``, ``I``, ``S``, ``C``). Rules are checked in that order and the
  first match wins.

Both return ``None`` when nothing is recognized. :func:`apply_heuristics`
only fills fields that are still unset, so a known value is never replaced.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

STYLE_TAGS = ("D", "I", "S", "C")

_NAME_CHARS = r"[A-Za-zÀ-ÖØ-öø-ÿ' -]{2,30}"
# One word, optionally followed by a second capitalized one ("Jean Paul").
_NAME_WORDS = (
    r"[A-Za-zÀ-ÖØ-öø-ÿ'-]{2,30}"
    r"(?:\s+[A-ZÀ-ÖØ-Þ][A-Za-zÀ-ÖØ-öø-ÿ'-]{1,29})?"
)
_NAME_PATTERNS = (
    re.compile(r"je m(?:['’]|e\s?)appelle\s+(" + _NAME_CHARS + ")", re.IGNORECASE),
    re.compile(r"moi c['’]est\s+(" + _NAME_CHARS + ")", re.IGNORECASE),
    re.compile(r"(?i:my name is)\s+(" + _NAME_WORDS + ")"),
)
_EDGE_NON_LETTERS = re.compile(r"^[^A-Za-zÀ-ÖØ-öø-ÿ]+|[^A-Za-zÀ-ÖØ-öø-ÿ]+$")
MIN_NAME_LENGTH = 2

_WANTS_ACTION = re.compile(r"action|résultat|vite|maintenant|objectif|deadline|priorit", re.IGNORECASE)
_ENTHUSIASM = re.compile(r"cool|idée|créatif|enthous|fun", re.IGNORECASE)
_CARES_PEOPLE = re.compile(r"écoute|relation|aider|ensemble|émotion|ressenti|bienveillance", re.IGNORECASE)
_CALM = re.compile(r"calme|rassure|routine|habitude", re.IGNORECASE)
_ASKS_DETAIL = re.compile(r"détail|exact|précis|critère|mesurable|plan|checklist", re.IGNORECASE)
_CAPS_RUN = re.compile(r"[A-Z]{3,}")
_DIGIT = re.compile(r"[0-9]")
LONG_MESSAGE_CHARS = 240


def extract_name(text: Optional[str]) -> Optional[str]:
    """Return a display name found in ``text`` or ``None``."""
    t = (text or "").strip()
    if not t:
        return None
    candidate: Optional[str] = None
    for pattern in _NAME_PATTERNS:
        m = pattern.search(t)
        if m:
            candidate = m.group(1)
            break
    if candidate is None and len(t.split()) == 1:
        candidate = t
    if candidate is None:
        return None
    name = _EDGE_NON_LETTERS.sub("", candidate.strip())
    return name if len(name) >= MIN_NAME_LENGTH else None


def infer_style(text: Optional[str]) -> Optional[str]:
    """Return the DISC tag suggested by ``text`` or ``None``."""
    t = (text or "").strip()
    exclamations = t.count("!")
    if _WANTS_ACTION.search(t) and (exclamations > 0 or _CAPS_RUN.search(t)):
        return "D"
    if exclamations > 1 or _ENTHUSIASM.search(t):
        return "I"
    if _CARES_PEOPLE.search(t) or _CALM.search(t):
        return "S"
    if _ASKS_DETAIL.search(t) or _DIGIT.search(t) or len(t) > LONG_MESSAGE_CHARS:
        return "C"
    return None


@dataclass(frozen=True)
class ProfileUpdate:
    """Fields newly derived from one message (``None`` = leave unchanged)."""

    name: Optional[str] = None
    style: Optional[str] = None

    @property
    def empty(self) -> bool:
        return self.name is None and self.style is None


def apply_heuristics(
    text: Optional[str],
    *,
    name: Optional[str] = None,
    style: Optional[str] = None,
) -> ProfileUpdate:
    """Derive values only for the profile fields that are currently unset."""
    return ProfileUpdate(
        name=extract_name(text) if not name else None,
        style=infer_style(text) if not style else None,
    )


__all__ = [
    "STYLE_TAGS",
    "ProfileUpdate",
    "extract_name",
    "infer_style",
    "apply_heuristics",
]
