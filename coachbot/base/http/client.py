"""Shared HTTP client pool for upstream vendors.

Purpose:
    Provide a centralized pool of reusable ``httpx.AsyncClient`` instances to
    avoid per-request allocations and reduce connection overhead across
    vendor adapters. Timeouts derive exclusively from
    :func:`get_timeout_config`.

External dependencies:
    - ``httpx`` for the underlying asynchronous HTTP client.

Lifecycle & cleanup:
    - Clients are cached by a composite key of ``base_url`` and ``purpose``
      string. Purposes allow distinct pools (e.g., "chat" vs "stream").
    - The FastAPI lifespan calls :func:`aclose_all_clients` on shutdown.
    - Tests install an ``httpx.MockTransport`` through
      :func:`set_transport_override`; every client created afterwards uses it.
"""

from __future__ import annotations

import contextlib
from typing import Dict, Optional, Tuple

import httpx

from ..timeouts import get_timeout_config

# Internal cache keyed by (base_url, purpose)
_CLIENTS: Dict[Tuple[Optional[str], str], httpx.AsyncClient] = {}
_TRANSPORT_OVERRIDE: Optional[httpx.AsyncBaseTransport] = None


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.AsyncClient:
    """Return a pooled ``httpx.AsyncClient`` for the given base URL and purpose.

    The first request for a key creates a client configured with timeouts from
    :func:`get_timeout_config`. Subsequent requests reuse the same instance.

    Parameters:
        base_url: Optional API base URL to associate with the client so
            relative request paths can be used. ``None`` groups clients under
            a shared key.
        purpose: A short string discriminating separate pools (e.g.,
            "chat", "stream"). Keep stable to maximize reuse.

    Concurrency:
        Creation happens without awaiting, so it is atomic with respect to
        other tasks on the same event loop.
    """
    key = (base_url, purpose)
    client = _CLIENTS.get(key)
    if client is not None and not client.is_closed:
        return client

    kwargs: Dict[str, object] = {"timeout": get_timeout_config().to_httpx()}
    if base_url:
        kwargs["base_url"] = base_url
    if _TRANSPORT_OVERRIDE is not None:
        kwargs["transport"] = _TRANSPORT_OVERRIDE
    client = httpx.AsyncClient(**kwargs)  # type: ignore[arg-type]
    _CLIENTS[key] = client
    return client


def set_transport_override(transport: Optional[httpx.AsyncBaseTransport]) -> None:
    """Route all subsequently created clients through ``transport``.

    Existing pooled clients are dropped (not closed) so the override takes
    effect immediately; pass ``None`` to restore real network access.
    """
    global _TRANSPORT_OVERRIDE
    _TRANSPORT_OVERRIDE = transport
    _CLIENTS.clear()


async def aclose_all_clients() -> None:
    """Close and clear all pooled HTTP clients.

    Useful in application shutdown phases when immediate release of network
    resources is desired.
    """
    clients = list(_CLIENTS.values())
    _CLIENTS.clear()
    for c in clients:
        # Pool teardown failures at shutdown are non-actionable.
        with contextlib.suppress(httpx.HTTPError, RuntimeError):
            await c.aclose()


__all__ = ["get_httpx_client", "set_transport_override", "aclose_all_clients"]
