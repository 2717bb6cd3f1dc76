"""Streaming package.

Canonical events, the incremental frame decoder, the delta normalizer, the
reply accumulator, the relay emitter and per-session metrics under a single
namespace.
"""

from .events import END, IGNORE, EndEvent, ErrorEvent, StreamEvent, TextEvent
from .frame_decoder import DataFrame, IncrementalFrameDecoder, parse_data_line
from .accumulator import ReplyAccumulator, ReplyState, accumulate, accumulate_all
from .streaming_metrics import StreamMetrics
from .normalizer import DeltaNormalizer, normalize_upstream
from .relay import DONE_FRAME, RelayEmitter, encode_event, single_error

__all__ = [
    "TextEvent",
    "ErrorEvent",
    "EndEvent",
    "StreamEvent",
    "END",
    "IGNORE",
    "DataFrame",
    "IncrementalFrameDecoder",
    "parse_data_line",
    "ReplyAccumulator",
    "ReplyState",
    "accumulate",
    "accumulate_all",
    "StreamMetrics",
    "DeltaNormalizer",
    "normalize_upstream",
    "DONE_FRAME",
    "RelayEmitter",
    "encode_event",
    "single_error",
]
