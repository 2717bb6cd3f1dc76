"""AnthropicAdapter (Messages API over server-sent events).

Streams ``POST {base_url}/messages`` with ``stream: true`` and translates
``content_block_delta`` / ``text_delta`` frames into text events.
"""

from __future__ import annotations

from typing import Any

from ..base.adapter_base import BaseAdapter
from ..base.models import UpstreamRequest
from ..base.streaming.events import DeltaResult
from .helpers import build_headers, build_params
from .stream_helpers import translate_stream_frame

__all__ = ["AnthropicAdapter"]


class AnthropicAdapter(BaseAdapter):
    """Anthropic Messages API adapter."""

    name = "anthropic"
    streaming = True

    def build_request(self, system_prompt: str, user_prompt: str, day: int) -> UpstreamRequest:
        key = self._require_key()
        return UpstreamRequest(
            url=f"{self.base_url}/messages",
            headers=build_headers(key),
            body=build_params(
                self.model,
                system_prompt,
                user_prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            ),
            stream=True,
        )

    def extract_delta(self, payload: Any) -> DeltaResult:  # noqa: ANN401 - decoded JSON
        return translate_stream_frame(payload)
