"""Streaming metrics data structures.

Isolated within the streaming package to keep orchestration code small and cohesive.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Collected metrics for a single relayed session.

    Fields:
      emitted: number of text deltas forwarded to the caller
      anomalies: number of ``data:`` payloads skipped as undecodable
      time_to_first_delta_ms: latency from session start to first text delta
      total_duration_ms: wall time until the session finalized
      reply_chars: length of the accumulated reply
    """

    emitted: int = 0
    anomalies: int = 0
    time_to_first_delta_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    reply_chars: int = 0
    started_at: float = field(default_factory=time.perf_counter, repr=False)

    def record_delta(self, text: str) -> bool:
        """Count a forwarded delta; return True when it is the first one."""
        self.emitted += 1
        self.reply_chars += len(text)
        if self.time_to_first_delta_ms is None:
            self.time_to_first_delta_ms = (time.perf_counter() - self.started_at) * 1000.0
            return True
        return False

    def finalize(self) -> None:
        if self.total_duration_ms is None:
            self.total_duration_ms = (time.perf_counter() - self.started_at) * 1000.0

    def as_fields(self) -> Dict[str, Any]:
        """Return the metrics as ``log_event`` keyword fields."""
        return {
            "emitted": self.emitted,
            "anomalies": self.anomalies,
            "time_to_first_delta_ms": _round(self.time_to_first_delta_ms),
            "total_duration_ms": _round(self.total_duration_ms),
            "reply_chars": self.reply_chars,
        }


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


__all__ = ["StreamMetrics"]
