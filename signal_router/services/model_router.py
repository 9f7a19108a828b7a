"""Failover router that walks a mode's provider chain until one succeeds.

For every request the chain is resolved against live configuration, then
providers are tried strictly one after another:

1. Providers still cooling down after a rate limit are skipped.
2. The first provider whose output parses into a recommendation wins; its
   rate-limit state is cleared and no later provider is contacted.
3. Any other outcome is noted, rate-limit shaped failures open a cooldown
   window, and the router moves on.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from signal_router.telemetry import record_provider_attempt, record_rate_limit

from .context_builder import RecommendationContext
from .llm_client import (
    GenerationOptions,
    ProviderCallError,
    ProviderHttpClient,
    invoke_provider,
)
from .provider_registry import ProviderRuntime, resolve_chain
from .rate_limit import RateLimitTracker
from .response_contract import Recommendation, ResponseContractError, parse_recommendation
from .types import RecommendationMode

logger = logging.getLogger(__name__)

_RATE_LIMIT_TEXT = re.compile(r"rate.?limit|quota|too many requests", re.IGNORECASE)


class RouterError(RuntimeError):
    """Base class for request-level routing failures."""

    code = "ROUTER_FAILED"


class NoProviderConfiguredError(RouterError):
    """No provider in the requested chain is configured."""

    code = "NO_PROVIDER_CONFIGURED"


class AllProvidersFailedError(RouterError):
    """Every configured provider was skipped or failed."""

    code = "ALL_PROVIDERS_FAILED"

    def __init__(self, notes: Sequence[str]) -> None:
        self.notes = list(notes)
        super().__init__("All providers failed. " + " | ".join(self.notes))


@dataclass(frozen=True)
class RoutedRecommendation:
    provider: str
    model: str
    mode: RecommendationMode
    recommendation: Recommendation


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def format_provider_note(provider: str, status: object, message: str) -> str:
    return f"[{provider}] {status} - {message}"


def is_rate_limit_error(exc: BaseException) -> bool:
    """Best-effort detection of rate limiting from status code or error text."""

    if getattr(exc, "status", None) == 429:
        return True
    text = f"{exc} {getattr(exc, 'body_text', '')}"
    return bool(_RATE_LIMIT_TEXT.search(text))


class ModelRouter:
    """Route recommendation requests across the configured providers."""

    def __init__(
        self,
        *,
        tracker: RateLimitTracker,
        http_client: ProviderHttpClient,
        options: GenerationOptions | None = None,
    ) -> None:
        self._tracker = tracker
        self._http_client = http_client
        self._options = options or GenerationOptions()

    @property
    def tracker(self) -> RateLimitTracker:
        return self._tracker

    async def route(
        self,
        mode: object,
        context: RecommendationContext,
        configuration: Mapping[str, str],
    ) -> RoutedRecommendation:
        """Return the first successful recommendation along the mode's chain."""

        resolved_mode = RecommendationMode.parse(mode)
        providers = resolve_chain(resolved_mode, configuration)
        if not providers:
            raise NoProviderConfiguredError(
                "No configured providers found. Set API keys in environment variables."
            )

        notes: list[str] = []
        for runtime in providers:
            if self._tracker.is_cooling_down(runtime.name):
                remaining = self._tracker.cooldown_remaining(runtime.name)
                logger.info(
                    "Skipping provider=%s cooldown_remaining=%.1fs",
                    runtime.name,
                    remaining,
                )
                record_provider_attempt(runtime.name, "skipped")
                notes.append(
                    format_provider_note(
                        runtime.name, 429, "temporarily skipped after rate limit"
                    )
                )
                continue

            try:
                recommendation = await self._attempt(runtime, context)
            except (ProviderCallError, ResponseContractError) as exc:
                notes.append(self._record_failure(runtime, exc))
                continue

            self._tracker.clear(runtime.name)
            record_provider_attempt(runtime.name, "success")
            logger.info(
                "Provider succeeded provider=%s model=%s mode=%s",
                runtime.name,
                runtime.model,
                resolved_mode.value,
            )
            return RoutedRecommendation(
                provider=runtime.name,
                model=runtime.model,
                mode=resolved_mode,
                recommendation=recommendation,
            )

        logger.warning("All providers failed mode=%s: %s", resolved_mode.value, notes)
        raise AllProvidersFailedError(notes)

    async def _attempt(
        self,
        runtime: ProviderRuntime,
        context: RecommendationContext,
    ) -> Recommendation:
        raw_text = await invoke_provider(runtime, context, self._http_client, self._options)
        logger.info(
            "Raw provider output provider=%s: %s",
            runtime.name,
            _truncate(raw_text),
        )
        return parse_recommendation(
            raw_text,
            themes=context.themes,
            top_signals=context.top_signals,
        )

    def _record_failure(self, runtime: ProviderRuntime, exc: Exception) -> str:
        """Update cooldown state for ``exc`` and return its diagnostic note."""

        status = getattr(exc, "status", None) or "error"
        if is_rate_limit_error(exc):
            state = self._tracker.record_failure(runtime.name)
            record_rate_limit(runtime.name)
            logger.warning(
                "Provider rate limited provider=%s strikes=%s",
                runtime.name,
                state.strikes,
            )
        else:
            logger.warning(
                "Provider failed provider=%s status=%s: %s",
                runtime.name,
                status,
                _truncate(str(exc)),
            )
        record_provider_attempt(runtime.name, "failure")
        return format_provider_note(runtime.name, status, str(exc))


__all__ = [
    "AllProvidersFailedError",
    "ModelRouter",
    "NoProviderConfiguredError",
    "RoutedRecommendation",
    "RouterError",
    "format_provider_note",
    "is_rate_limit_error",
]
