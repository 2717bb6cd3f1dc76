"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `coachbot.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .coachbot_error import (
    CoachbotError,
    CallerDisconnected,
    PersistenceError,
    UnsupportedProviderError,
    UpstreamDecodeAnomaly,
    UpstreamUnavailableError,
)
from .classification import classify_exception, status_to_code

__all__ = [
    "ErrorCode",
    "CoachbotError",
    "UnsupportedProviderError",
    "UpstreamUnavailableError",
    "PersistenceError",
    "CallerDisconnected",
    "UpstreamDecodeAnomaly",
    "classify_exception",
    "status_to_code",
]
