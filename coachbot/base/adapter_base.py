"""Shared construction logic for vendor adapters.

Each adapter resolves its settings once, at construction, through
:func:`coachbot.config.get_provider_config` (defaults, config file, env,
explicit kwargs). Building a request without a credential raises
:class:`UpstreamUnavailableError` so no network call is attempted.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..config import get_provider_config
from ..config.env import ENV_MAP
from .errors import UpstreamUnavailableError

MISSING_API_KEY_ERROR = "manquante"


class BaseAdapter:
    """Common state for the three adapter variants.

    Subclasses set ``name`` and ``streaming`` and implement
    ``build_request`` / ``extract_delta``.
    """

    name: str = ""
    streaming: bool = True

    def __init__(
        self,
        *,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> None:
        cfg: Dict[str, Any] = get_provider_config(
            self.name,
            {
                "model": model,
                "api_key": api_key,
                "base_url": base_url,
                "max_tokens": max_tokens,
                "temperature": temperature,
            },
        )
        self.model: str = cfg["model"]
        self.api_key: Optional[str] = cfg.get("api_key")
        self.base_url: str = str(cfg["base_url"]).rstrip("/")
        self.max_tokens: int = int(cfg["max_tokens"])
        self.temperature: float = float(cfg["temperature"])

    def _require_key(self) -> str:
        if not self.api_key:
            raise UpstreamUnavailableError(
                message=f"{ENV_MAP.get(self.name, self.name.upper())} {MISSING_API_KEY_ERROR}",
                provider=self.name,
            )
        return self.api_key

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"{type(self).__name__}(model={self.model!r}, base_url={self.base_url!r})"


__all__ = ["BaseAdapter", "MISSING_API_KEY_ERROR"]
