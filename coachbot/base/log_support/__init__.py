"""Logging support: JSON formatter and the per-request context record.

Used by ``coachbot.base.logging``; import from there in application code.
"""

from .json_formatter import JsonFormatter, ISO
from .logging_context import LogContext

__all__ = ["JsonFormatter", "ISO", "LogContext"]
