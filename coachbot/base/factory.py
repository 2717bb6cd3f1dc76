"""Provider Factory utilities.

Purpose
-------
Resolve a caller-supplied vendor name to one of the closed set of adapter
variants. Selection is a single table lookup, never a cascade of
conditionals. Adapters are imported lazily using ``importlib`` to keep side
effects out of the factory layer.

Timeout and fallback semantics
------------------------------
No network calls happen here. The factory performs no retries or fallbacks;
it either returns an adapter or raises :class:`UnsupportedProviderError`
before any upstream call is attempted.

Scope
-----
Supported vendors: ``anthropic`` (alias ``claude``), ``openai`` (alias
``gpt``) and ``gemini`` (alias ``google``).
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Optional, Tuple, Type

from .errors import UnsupportedProviderError
from .interfaces import ProviderAdapter

UNSUPPORTED_PROVIDER_MESSAGE = "Fournisseur inconnu ou non activé"


def create_adapter(provider: str, **kwargs: Any) -> ProviderAdapter:
    """Compatibility helper that delegates to :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, **kwargs)


class ProviderFactory:
    """Create vendor adapters based on a canonical name (e.g., ``"openai"``)."""

    # Map canonical vendor names to import paths and class names
    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "anthropic": {"module": "coachbot.anthropic.client", "class": "AnthropicAdapter"},
        "openai": {"module": "coachbot.openai.client", "class": "OpenAIAdapter"},
        "gemini": {"module": "coachbot.gemini.client", "class": "GeminiAdapter"},
    }

    _ALIASES: Dict[str, str] = {
        "claude": "anthropic",
        "gpt": "openai",
        "chatgpt": "openai",
        "google": "gemini",
    }

    @classmethod
    def canonical_name(cls, provider: Optional[str]) -> Optional[str]:
        """Return the canonical vendor key for ``provider`` or ``None``."""
        name = (provider or "").lower().strip()
        name = cls._ALIASES.get(name, name)
        return name if name in cls._PROVIDERS else None

    @classmethod
    def create(cls, provider: str, **kwargs: Any) -> ProviderAdapter:
        """Create an adapter instance.

        Parameters
        ----------
        provider:
            Vendor name or alias (case-insensitive).
        **kwargs:
            Adapter constructor kwargs (``model``, ``api_key``, ``base_url``,
            ``max_tokens``, ``temperature``).

        Raises
        ------
        UnsupportedProviderError
            If the name is unknown or the adapter rejects its arguments.
        """
        name = cls.canonical_name(provider)
        if name is None:
            raise UnsupportedProviderError(
                message=UNSUPPORTED_PROVIDER_MESSAGE,
                provider=provider or None,
            )
        spec = cls._PROVIDERS[name]
        mod = import_module(spec["module"])
        klass: Type = getattr(mod, spec["class"])
        try:
            return klass(**kwargs)
        except TypeError as exc:
            raise UnsupportedProviderError(
                message=f"Invalid arguments for '{name}' adapter constructor: {exc}",
                provider=name,
                raw=exc,
            ) from exc

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return canonical vendor names in deterministic order."""
        return tuple(cls._PROVIDERS.keys())


__all__ = ["ProviderFactory", "create_adapter", "UNSUPPORTED_PROVIDER_MESSAGE"]
