"""Shared enums for the recommendation pipeline.

Kept in their own module so the context builder and the provider registry
can both import them without depending on each other.
"""

from __future__ import annotations

from enum import Enum


class RecommendationMode(str, Enum):
    """Quality/speed trade-off requested by the caller."""

    SAFE = "safe"
    BALANCED = "balanced"
    FAST = "fast"

    @classmethod
    def parse(cls, value: object) -> "RecommendationMode":
        """Return the matching mode; anything unrecognized is ``BALANCED``."""

        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        try:
            return cls(text)
        except ValueError:
            return cls.BALANCED


__all__ = ["RecommendationMode"]
