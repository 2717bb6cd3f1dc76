"""
Vendor-agnostic interfaces for the adapter layer.

This module re-exports Protocols split into single-class modules under
``coachbot.base.interfaces_parts`` while keeping imports stable for upstream
code.
"""

from __future__ import annotations

from .interfaces_parts import ProviderAdapter

__all__ = ["ProviderAdapter"]
