"""coachbot package

Streaming chat relay and per-day journal service for a coaching assistant.

Purpose:
    Relay a user's message to one of several LLM vendors, stream the reply
    back as it is produced, and keep a durable, ordered per-user, per-day
    journal of both sides of the conversation. The HTTP surface lives in
    :mod:`coachbot.service.app`; this module only re-exports the small set of
    names useful to embedders and tests.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`CoachbotError`, :class:`ErrorCode` and the relay
      taxonomy subclasses
    - Factory: :class:`ProviderFactory`, :func:`create`
"""

from .base.errors import (
    CoachbotError,
    ErrorCode,
    PersistenceError,
    UnsupportedProviderError,
    UpstreamUnavailableError,
)
from .base.factory import ProviderFactory, create_adapter

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "CoachbotError",
    "ErrorCode",
    "PersistenceError",
    "UnsupportedProviderError",
    "UpstreamUnavailableError",
    # Factory
    "ProviderFactory",
    "create",
]


def create(provider_name: str, **kwargs):
    """Instantiate a vendor adapter by name.

    Parameters
    ----------
    provider_name:
        Vendor name or alias (for example ``"anthropic"`` or ``"claude"``).
    **kwargs:
        Adapter constructor overrides (``model``, ``api_key``, ``base_url``,
        ``max_tokens``, ``temperature``).

    Raises
    ------
    UnsupportedProviderError
        If no adapter is registered for ``provider_name``.
    """
    return create_adapter(provider_name, **kwargs)
