"""Shared cooldown bookkeeping for rate-limited providers."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

BASE_COOLDOWN_SECONDS = 20.0
MAX_COOLDOWN_SECONDS = 300.0


@dataclass(frozen=True)
class RateLimitState:
    strikes: int
    cooldown_until: float


def cooldown_seconds(strikes: int) -> float:
    """Exponential backoff: 20s, 40s, 80s ... capped at five minutes."""

    return min(BASE_COOLDOWN_SECONDS * 2 ** (max(strikes, 1) - 1), MAX_COOLDOWN_SECONDS)


class RateLimitTracker:
    """Per-provider strike counts and cooldown expiries.

    One instance is created at service startup and shared by every request;
    rate limits belong to the credential/provider pair rather than to a
    single caller.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._states: dict[str, RateLimitState] = {}

    def is_cooling_down(self, name: str) -> bool:
        with self._lock:
            state = self._states.get(name)
            return state is not None and self._clock() < state.cooldown_until

    def cooldown_remaining(self, name: str) -> float:
        """Seconds until ``name`` may be tried again (0 when not cooling down)."""

        with self._lock:
            state = self._states.get(name)
            if state is None:
                return 0.0
            return max(state.cooldown_until - self._clock(), 0.0)

    def record_failure(self, name: str) -> RateLimitState:
        """Add a strike for ``name`` and restart its cooldown window."""

        with self._lock:
            current = self._states.get(name)
            strikes = (current.strikes if current else 0) + 1
            state = RateLimitState(
                strikes=strikes,
                cooldown_until=self._clock() + cooldown_seconds(strikes),
            )
            self._states[name] = state
            return state

    def clear(self, name: str) -> None:
        with self._lock:
            self._states.pop(name, None)

    def state(self, name: str) -> RateLimitState | None:
        with self._lock:
            return self._states.get(name)

    def snapshot(self) -> dict[str, RateLimitState]:
        with self._lock:
            return dict(self._states)


__all__ = [
    "BASE_COOLDOWN_SECONDS",
    "MAX_COOLDOWN_SECONDS",
    "RateLimitState",
    "RateLimitTracker",
    "cooldown_seconds",
]
