"""
CoachBot Base Package

Exports the vendor-agnostic contracts, the streaming pipeline and the adapter
factory used by the service layer.

- Interfaces: the ``ProviderAdapter`` boundary every vendor implements
- Models: upstream request and prompt value objects
- Streaming: canonical events, frame decoding, normalization, relay
- Factory: lazy creation of vendor adapters by canonical name
"""

from .factory import ProviderFactory, create_adapter
from .interfaces import ProviderAdapter
from .models import ChatPrompt, UpstreamRequest
from .timeouts import TimeoutConfig, get_timeout_config
from .cancellation import CancellationToken
from .streaming import (
    END,
    IGNORE,
    EndEvent,
    ErrorEvent,
    RelayEmitter,
    ReplyState,
    StreamMetrics,
    TextEvent,
    normalize_upstream,
)

__all__ = [
    # Models
    "ChatPrompt",
    "UpstreamRequest",
    # Interfaces
    "ProviderAdapter",
    # Factory
    "ProviderFactory",
    "create_adapter",
    # Timeouts & Cancellation
    "TimeoutConfig",
    "get_timeout_config",
    "CancellationToken",
    # Streaming
    "TextEvent",
    "ErrorEvent",
    "EndEvent",
    "END",
    "IGNORE",
    "ReplyState",
    "StreamMetrics",
    "RelayEmitter",
    "normalize_upstream",
]
