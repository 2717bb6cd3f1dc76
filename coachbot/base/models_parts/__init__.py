"""One-class-per-file domain models re-exported by ``coachbot.base.models``."""

from .chat_prompt import ChatPrompt
from .upstream_request import UpstreamRequest

__all__ = ["ChatPrompt", "UpstreamRequest"]
