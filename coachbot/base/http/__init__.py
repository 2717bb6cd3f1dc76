"""HTTP utilities package for vendor adapters.

Exposes pooled async httpx clients and the test transport hook.
"""

from .client import aclose_all_clients, get_httpx_client, set_transport_override

__all__ = ["get_httpx_client", "set_transport_override", "aclose_all_clients"]
