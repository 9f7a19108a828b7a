"""Static catalogue of LLM backends and the per-mode fallback chains."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Sequence

from .types import RecommendationMode


class FormatFamily(str, Enum):
    """Request/response envelope a backend speaks."""

    OPENAI_CHAT = "openai-chat"
    GEMINI = "gemini"
    COHERE = "cohere"
    CLOUDFLARE_RUN = "cloudflare-run"
    HUGGINGFACE_INFERENCE = "huggingface-inference"
    OLLAMA_CHAT = "ollama-chat"


@dataclass(frozen=True)
class ProviderDefinition:
    """Configuration keys and built-in defaults for one backend."""

    name: str
    family: FormatFamily
    key_env: str
    endpoint_env: str
    model_env: str
    default_endpoint: str
    default_model: str
    account_env: Optional[str] = None


@dataclass(frozen=True)
class ProviderRuntime:
    """A provider definition resolved against live configuration."""

    name: str
    family: FormatFamily
    endpoint: str
    model: str
    api_key: str = ""
    account_id: str = ""


@dataclass(frozen=True)
class ConfiguredProvider:
    """Status view of a resolvable provider."""

    name: str
    model: str
    family: FormatFamily


OLLAMA_ENABLED_ENV = "OLLAMA_ENABLED"

PROVIDERS: Mapping[str, ProviderDefinition] = {
    definition.name: definition
    for definition in (
        ProviderDefinition(
            name="groq",
            family=FormatFamily.OPENAI_CHAT,
            key_env="GROQ_API_KEY",
            endpoint_env="GROQ_BASE_URL",
            model_env="GROQ_MODEL",
            default_endpoint="https://api.groq.com/openai/v1/chat/completions",
            default_model="llama-3.3-70b-versatile",
        ),
        ProviderDefinition(
            name="gemini",
            family=FormatFamily.GEMINI,
            key_env="GEMINI_API_KEY",
            endpoint_env="GEMINI_BASE_URL",
            model_env="GEMINI_MODEL",
            default_endpoint="https://generativelanguage.googleapis.com/v1beta/models",
            default_model="gemini-2.0-flash",
        ),
        ProviderDefinition(
            name="mistral",
            family=FormatFamily.OPENAI_CHAT,
            key_env="MISTRAL_API_KEY",
            endpoint_env="MISTRAL_BASE_URL",
            model_env="MISTRAL_MODEL",
            default_endpoint="https://api.mistral.ai/v1/chat/completions",
            default_model="mistral-large-latest",
        ),
        ProviderDefinition(
            name="cohere",
            family=FormatFamily.COHERE,
            key_env="COHERE_API_KEY",
            endpoint_env="COHERE_BASE_URL",
            model_env="COHERE_MODEL",
            default_endpoint="https://api.cohere.com/v2/chat",
            default_model="command-r-plus",
        ),
        ProviderDefinition(
            name="codestral",
            family=FormatFamily.OPENAI_CHAT,
            key_env="CODESTRAL_API_KEY",
            endpoint_env="CODESTRAL_BASE_URL",
            model_env="CODESTRAL_MODEL",
            default_endpoint="https://codestral.mistral.ai/v1/chat/completions",
            default_model="codestral-latest",
        ),
        ProviderDefinition(
            name="nvidia",
            family=FormatFamily.OPENAI_CHAT,
            key_env="NVIDIA_NIM_API_KEY",
            endpoint_env="NVIDIA_NIM_BASE_URL",
            model_env="NVIDIA_NIM_MODEL",
            default_endpoint="https://integrate.api.nvidia.com/v1/chat/completions",
            default_model="meta/llama-3.1-70b-instruct",
        ),
        ProviderDefinition(
            name="cerebras",
            family=FormatFamily.OPENAI_CHAT,
            key_env="CEREBRAS_API_KEY",
            endpoint_env="CEREBRAS_BASE_URL",
            model_env="CEREBRAS_MODEL",
            default_endpoint="https://api.cerebras.ai/v1/chat/completions",
            default_model="llama-3.3-70b",
        ),
        ProviderDefinition(
            name="huggingface",
            family=FormatFamily.HUGGINGFACE_INFERENCE,
            key_env="HUGGINGFACE_API_KEY",
            endpoint_env="HUGGINGFACE_BASE_URL",
            model_env="HUGGINGFACE_MODEL",
            default_endpoint="https://api-inference.huggingface.co/models",
            default_model="mistralai/Mistral-7B-Instruct-v0.3",
        ),
        ProviderDefinition(
            name="cloudflare",
            family=FormatFamily.CLOUDFLARE_RUN,
            key_env="CLOUDFLARE_API_KEY",
            endpoint_env="CLOUDFLARE_BASE_URL",
            model_env="CLOUDFLARE_MODEL",
            default_endpoint="https://api.cloudflare.com/client/v4/accounts",
            default_model="@cf/meta/llama-3.1-8b-instruct",
            account_env="CLOUDFLARE_ACCOUNT_ID",
        ),
        ProviderDefinition(
            name="ollama",
            family=FormatFamily.OLLAMA_CHAT,
            key_env="OLLAMA_API_KEY",
            endpoint_env="OLLAMA_BASE_URL",
            model_env="OLLAMA_MODEL",
            default_endpoint="http://localhost:11434/api/chat",
            default_model="llama3.1",
        ),
        ProviderDefinition(
            name="opencode",
            family=FormatFamily.OPENAI_CHAT,
            key_env="OPENCODE_API_KEY",
            endpoint_env="OPENCODE_BASE_URL",
            model_env="OPENCODE_MODEL",
            default_endpoint="https://api.openai.com/v1/chat/completions",
            default_model="gpt-4o-mini",
        ),
    )
}

# Hand-tuned orderings: ``safe`` leads with accuracy-oriented backends,
# ``fast`` with low-latency ones.
MODE_CHAINS: Mapping[RecommendationMode, tuple[str, ...]] = {
    RecommendationMode.SAFE: (
        "gemini",
        "groq",
        "mistral",
        "cerebras",
        "cohere",
        "nvidia",
        "cloudflare",
        "huggingface",
        "codestral",
        "opencode",
        "ollama",
    ),
    RecommendationMode.BALANCED: (
        "groq",
        "gemini",
        "mistral",
        "cerebras",
        "cohere",
        "nvidia",
        "codestral",
        "cloudflare",
        "huggingface",
        "opencode",
        "ollama",
    ),
    RecommendationMode.FAST: (
        "groq",
        "cerebras",
        "nvidia",
        "gemini",
        "mistral",
        "cohere",
        "codestral",
        "ollama",
        "cloudflare",
        "huggingface",
        "opencode",
    ),
}


def chain_for(mode: object) -> tuple[str, ...]:
    """Return the ordered provider names for ``mode`` (``balanced`` fallback)."""

    return MODE_CHAINS[RecommendationMode.parse(mode)]


def _lookup(configuration: Mapping[str, str], key: Optional[str]) -> str:
    if not key:
        return ""
    value = configuration.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _ollama_opted_in(configuration: Mapping[str, str], api_key: str) -> bool:
    """Ollama assumes a local server, so it must be switched on explicitly."""

    enabled = _lookup(configuration, OLLAMA_ENABLED_ENV).lower()
    if enabled == "false":
        return False
    definition = PROVIDERS["ollama"]
    return (
        enabled == "true"
        or bool(_lookup(configuration, definition.endpoint_env))
        or bool(api_key)
    )


def resolve(name: str, configuration: Mapping[str, str]) -> ProviderRuntime | None:
    """Resolve ``name`` against ``configuration``; ``None`` means unconfigured."""

    definition = PROVIDERS.get(name)
    if definition is None:
        return None

    endpoint = _lookup(configuration, definition.endpoint_env) or definition.default_endpoint
    model = _lookup(configuration, definition.model_env) or definition.default_model
    api_key = _lookup(configuration, definition.key_env)
    account_id = _lookup(configuration, definition.account_env)

    if not endpoint or not model:
        return None
    if definition.family is FormatFamily.OLLAMA_CHAT:
        if not _ollama_opted_in(configuration, api_key):
            return None
    elif not api_key:
        return None
    if definition.family is FormatFamily.CLOUDFLARE_RUN and not account_id:
        return None

    return ProviderRuntime(
        name=definition.name,
        family=definition.family,
        endpoint=endpoint,
        model=model,
        api_key=api_key,
        account_id=account_id,
    )


def resolve_chain(mode: object, configuration: Mapping[str, str]) -> list[ProviderRuntime]:
    """Resolve the chain for ``mode``, dropping unconfigured providers in order."""

    runtimes: list[ProviderRuntime] = []
    for name in chain_for(mode):
        runtime = resolve(name, configuration)
        if runtime is not None:
            runtimes.append(runtime)
    return runtimes


def all_provider_names() -> Sequence[str]:
    """Union of every mode chain in first-seen order."""

    seen: dict[str, None] = {}
    for mode in (
        RecommendationMode.SAFE,
        RecommendationMode.BALANCED,
        RecommendationMode.FAST,
    ):
        for name in MODE_CHAINS[mode]:
            seen.setdefault(name, None)
    return tuple(seen)


def list_configured_providers(configuration: Mapping[str, str]) -> list[ConfiguredProvider]:
    """Report every provider that resolves under ``configuration``."""

    configured: list[ConfiguredProvider] = []
    for name in all_provider_names():
        runtime = resolve(name, configuration)
        if runtime is None:
            continue
        configured.append(
            ConfiguredProvider(name=runtime.name, model=runtime.model, family=runtime.family)
        )
    return configured


__all__ = [
    "ConfiguredProvider",
    "FormatFamily",
    "MODE_CHAINS",
    "PROVIDERS",
    "ProviderDefinition",
    "ProviderRuntime",
    "all_provider_names",
    "chain_for",
    "list_configured_providers",
    "resolve",
    "resolve_chain",
]
