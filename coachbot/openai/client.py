"""OpenAIAdapter (chat completions over server-sent events)."""

from __future__ import annotations

from typing import Any

from ..base.adapter_base import BaseAdapter
from ..base.models import UpstreamRequest
from ..base.streaming.events import DeltaResult
from .openai_chat import build_headers, build_params, translate_chunk

__all__ = ["OpenAIAdapter"]


class OpenAIAdapter(BaseAdapter):
    """OpenAI adapter; also fits OpenAI-compatible endpoints via ``base_url``."""

    name = "openai"
    streaming = True

    def build_request(self, system_prompt: str, user_prompt: str, day: int) -> UpstreamRequest:
        key = self._require_key()
        return UpstreamRequest(
            url=f"{self.base_url}/chat/completions",
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
        return translate_chunk(payload)
