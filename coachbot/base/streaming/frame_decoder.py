"""Incremental frame decoder for line-oriented upstream protocols.

Upstream bodies arrive as arbitrary byte chunks. A chunk may end in the middle
of a line, or in the middle of a multi-byte UTF-8 sequence. The decoder keeps
both pieces of state between calls:

* an incremental codec decoder holding incomplete UTF-8 sequences, and
* a text buffer holding the trailing fragment after the last ``\\n``.

Feeding a stream whole or split at any byte offset yields the same lines.

``parse_data_line`` then interprets one decoded line. Only lines starting with
``data:`` are of interest; the ``[DONE]`` sentinel maps to end of stream and a
payload that is not valid JSON becomes an :class:`UpstreamDecodeAnomaly`
record rather than an exception.
"""
from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ..errors import UpstreamDecodeAnomaly
from .events import END, EndEvent

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class DataFrame:
    """A parsed ``data:`` payload, prior to vendor-specific interpretation."""

    payload: Any


ParsedLine = Union[DataFrame, EndEvent, UpstreamDecodeAnomaly]


class IncrementalFrameDecoder:
    """Turn a byte stream into complete text lines across chunk boundaries."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last complete line."""
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        """Decode ``chunk`` and return every line it completes."""
        if not chunk:
            return []
        self._buffer += self._decoder.decode(chunk)
        return self._drain()

    def flush(self) -> List[str]:
        """Signal end of input and return the final unterminated line, if any."""
        self._buffer += self._decoder.decode(b"", final=True)
        lines = self._drain()
        if self._buffer:
            lines.append(self._buffer.rstrip("\r"))
            self._buffer = ""
        return lines

    def _drain(self) -> List[str]:
        *complete, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in complete]


def parse_data_line(line: str) -> Optional[ParsedLine]:
    """Interpret one decoded line.

    Returns ``None`` for lines that are not ``data:`` lines or whose payload
    is empty, :data:`END` for the ``[DONE]`` sentinel, a
    :class:`DataFrame` for valid JSON, and an
    :class:`UpstreamDecodeAnomaly` for anything else (including payloads
    nested too deeply for the JSON decoder).
    """
    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):].strip()
    if not payload:
        return None
    if payload == DONE_SENTINEL:
        return END
    try:
        return DataFrame(json.loads(payload))
    except (ValueError, RecursionError) as e:
        return UpstreamDecodeAnomaly(payload=payload, reason=str(e))


__all__ = [
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "DataFrame",
    "ParsedLine",
    "IncrementalFrameDecoder",
    "parse_data_line",
]
