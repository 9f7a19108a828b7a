"""Recommendation pipeline: signal analysis, context, registry and routing."""

from .context_builder import RecommendationContext, build_context
from .llm_client import GenerationOptions, ProviderCallError, ProviderHttpClient
from .model_router import (
    AllProvidersFailedError,
    ModelRouter,
    NoProviderConfiguredError,
    RoutedRecommendation,
    RouterError,
)
from .provider_registry import (
    ConfiguredProvider,
    FormatFamily,
    ProviderRuntime,
    chain_for,
    list_configured_providers,
    resolve,
)
from .rate_limit import RateLimitTracker
from .response_contract import Recommendation, ResponseContractError
from .types import RecommendationMode

__all__ = [
    "AllProvidersFailedError",
    "ConfiguredProvider",
    "FormatFamily",
    "GenerationOptions",
    "ModelRouter",
    "NoProviderConfiguredError",
    "ProviderCallError",
    "ProviderHttpClient",
    "ProviderRuntime",
    "RateLimitTracker",
    "Recommendation",
    "RecommendationContext",
    "RecommendationMode",
    "ResponseContractError",
    "RoutedRecommendation",
    "RouterError",
    "build_context",
    "chain_for",
    "list_configured_providers",
    "resolve",
]
