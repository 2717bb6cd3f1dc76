"""
Vendor-agnostic domain models public surface.

This module re-exports the one-class-per-file implementations under
``coachbot.base.models_parts`` to keep imports stable.
"""

from .models_parts.chat_prompt import ChatPrompt
from .models_parts.upstream_request import UpstreamRequest

__all__ = [
    "ChatPrompt",
    "UpstreamRequest",
]
