"""Unified coachbot error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``coachbot.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.coachbot_error import (
    CoachbotError,
    CallerDisconnected,
    PersistenceError,
    UnsupportedProviderError,
    UpstreamDecodeAnomaly,
    UpstreamUnavailableError,
)
from .errors_parts.classification import classify_exception, status_to_code

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
