"""Cooperative cancellation (public import path).

``CancellationToken`` carries a caller disconnect from the relay emitter to
the upstream read loop so the upstream connection is released. The concrete
implementation lives under ``cancellation_parts``.
"""

from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken"]
