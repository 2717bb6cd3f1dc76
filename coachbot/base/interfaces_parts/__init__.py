"""Interfaces (Protocols) split into single-class modules.

``coachbot.base.interfaces`` re-exports them as a stable API.
"""

from .provider_adapter import ProviderAdapter

__all__ = ["ProviderAdapter"]
