"""
OpenAI adapter package.

Exports:
- OpenAIAdapter: chat-completions streaming adapter
"""

from .client import OpenAIAdapter

__all__ = ["OpenAIAdapter"]
