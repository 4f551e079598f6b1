"""Bounded executor exports for gitdrivesync."""

from __future__ import annotations

from .bounded import DEFAULT_LIMIT, BoundedExecutor

__all__ = ["BoundedExecutor", "DEFAULT_LIMIT"]
