"""DTO validation package for inbound request bodies."""

from .chat import ChatStreamBody, JournalSaveBody, ProfileBody

__all__ = [
    "ChatStreamBody",
    "JournalSaveBody",
    "ProfileBody",
]
