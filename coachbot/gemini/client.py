"""GeminiAdapter (single-body ``generateContent``).

Gemini is driven through the non-incremental ``models/{model}:generateContent``
endpoint. The relay reads the whole body and passes it to ``extract_delta``
once; the adapter joins every ``candidates[0].content.parts[*].text`` into one
text event and the relay appends the end event.
"""

from __future__ import annotations

from typing import Any, Dict

from ..base.adapter_base import BaseAdapter
from ..base.errors import ErrorCode
from ..base.models import UpstreamRequest
from ..base.streaming.events import IGNORE, DeltaResult, ErrorEvent, text_or_ignore

__all__ = ["GeminiAdapter", "extract_candidate_text"]


def extract_candidate_text(payload: Any) -> str:  # noqa: ANN401 - decoded JSON
    """Concatenate the text parts of the first candidate ('' when absent)."""
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    return "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))


class GeminiAdapter(BaseAdapter):
    """Google Gemini adapter (reply synthesized as a single delta)."""

    name = "gemini"
    streaming = False

    def build_request(self, system_prompt: str, user_prompt: str, day: int) -> UpstreamRequest:
        key = self._require_key()
        body: Dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "maxOutputTokens": self.max_tokens,
                "temperature": self.temperature,
            },
        }
        return UpstreamRequest(
            url=f"{self.base_url}/models/{self.model}:generateContent",
            headers={"x-goog-api-key": key, "content-type": "application/json"},
            body=body,
            stream=False,
        )

    def extract_delta(self, payload: Any) -> DeltaResult:  # noqa: ANN401 - decoded JSON
        if isinstance(payload, dict) and payload.get("error"):
            err = payload["error"]
            message = err.get("message") if isinstance(err, dict) else err
            return ErrorEvent(message=str(message or "gemini error"), code=ErrorCode.SERVER_ERROR)
        text = extract_candidate_text(payload)
        return text_or_ignore(text) if text else IGNORE
