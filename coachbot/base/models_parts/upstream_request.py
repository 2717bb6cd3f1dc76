"""
Upstream request descriptor.

Produced by a vendor adapter's ``build_request`` and executed by the relay.
Keeping the descriptor a plain value object lets tests assert on the exact
URL, headers and body without any network.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class UpstreamRequest:
    """Everything needed to open one upstream call.

    Attributes:
        url: Absolute endpoint URL.
        headers: Request headers, credentials included.
        body: JSON body.
        method: HTTP method (always ``POST`` for the supported vendors).
        stream: ``True`` when the body is an incremental ``data:`` stream;
            ``False`` for single-body vendors whose reply is synthesized into
            one text event.
    """

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    method: str = "POST"
    stream: bool = True


__all__ = ["UpstreamRequest"]
