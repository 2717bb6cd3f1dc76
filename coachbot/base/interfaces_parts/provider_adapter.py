"""ProviderAdapter Protocol (single-class module).

The one capability every vendor variant implements.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..models import UpstreamRequest
from ..streaming.events import DeltaResult


@runtime_checkable
class ProviderAdapter(Protocol):
    """Vendor-specific request building and frame interpretation.

    ``build_request`` raises ``UpstreamUnavailableError`` when no credential
    is configured, so the failure happens before any network call.

    ``extract_delta`` receives one parsed JSON payload (a ``data:`` frame for
    streaming vendors, the whole response body otherwise) and returns a
    ``TextEvent``, an ``ErrorEvent``, ``END`` or ``IGNORE``. It must never
    return an empty ``TextEvent`` and must not raise on unexpected shapes.
    """

    name: str
    model: str
    streaming: bool

    def build_request(self, system_prompt: str, user_prompt: str, day: int) -> UpstreamRequest:  # pragma: no cover - interface
        ...

    def extract_delta(self, payload: Any) -> DeltaResult:  # pragma: no cover - interface
        ...
