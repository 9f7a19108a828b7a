"""Tests for provider chains and configuration resolution."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from signal_router.config.settings import ProvidersConfig  # noqa: E402
from signal_router.services.provider_registry import (  # noqa: E402
    MODE_CHAINS,
    PROVIDERS,
    FormatFamily,
    chain_for,
    list_configured_providers,
    resolve,
    resolve_chain,
)
from signal_router.services.types import RecommendationMode  # noqa: E402


def test_every_chain_is_a_permutation_of_all_providers():
    expected = sorted(PROVIDERS)
    for mode in RecommendationMode:
        assert sorted(chain_for(mode)) == expected
    assert len(expected) == 11


def test_mode_chains_lead_with_expected_providers():
    assert chain_for("safe")[0] == "gemini"
    assert chain_for("balanced")[0] == "groq"
    assert chain_for("fast")[:3] == ("groq", "cerebras", "nvidia")


def test_unknown_mode_uses_balanced_chain():
    assert chain_for("turbo") == MODE_CHAINS[RecommendationMode.BALANCED]
    assert chain_for(None) == MODE_CHAINS[RecommendationMode.BALANCED]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("safe", RecommendationMode.SAFE),
        ("  fast ", RecommendationMode.FAST),
        ("SAFE", RecommendationMode.BALANCED),
        ("Fast", RecommendationMode.BALANCED),
        ("", RecommendationMode.BALANCED),
    ],
)
def test_mode_names_are_trimmed_and_case_sensitive(raw, expected):
    assert RecommendationMode.parse(raw) is expected


def test_empty_configuration_resolves_nothing():
    assert all(resolve(name, {}) is None for name in PROVIDERS)
    assert list_configured_providers({}) == []
    assert resolve_chain("safe", {}) == []


def test_resolve_uses_defaults_when_only_key_is_set():
    runtime = resolve("groq", {"GROQ_API_KEY": "gsk-test"})

    assert runtime is not None
    assert runtime.family is FormatFamily.OPENAI_CHAT
    assert runtime.endpoint == "https://api.groq.com/openai/v1/chat/completions"
    assert runtime.model == "llama-3.3-70b-versatile"
    assert runtime.api_key == "gsk-test"


def test_resolve_applies_overrides_and_ignores_blank_values():
    config = {
        "MISTRAL_API_KEY": " key ",
        "MISTRAL_MODEL": "mistral-small",
        "MISTRAL_BASE_URL": "   ",
    }

    runtime = resolve("mistral", config)

    assert runtime.api_key == "key"
    assert runtime.model == "mistral-small"
    assert runtime.endpoint == PROVIDERS["mistral"].default_endpoint


def test_blank_credential_is_unconfigured():
    assert resolve("cohere", {"COHERE_API_KEY": "   "}) is None


def test_unknown_provider_name():
    assert resolve("openrouter", {"OPENROUTER_API_KEY": "x"}) is None


def test_cloudflare_requires_account_id():
    assert resolve("cloudflare", {"CLOUDFLARE_API_KEY": "cf"}) is None

    runtime = resolve(
        "cloudflare",
        {"CLOUDFLARE_API_KEY": "cf", "CLOUDFLARE_ACCOUNT_ID": "acc123"},
    )
    assert runtime.account_id == "acc123"
    assert runtime.family is FormatFamily.CLOUDFLARE_RUN


@pytest.mark.parametrize(
    ("config", "configured"),
    [
        ({}, False),
        ({"OLLAMA_MODEL": "qwen2.5"}, False),
        ({"OLLAMA_ENABLED": "true"}, True),
        ({"OLLAMA_ENABLED": "TRUE"}, True),
        ({"OLLAMA_BASE_URL": "http://gpu-box:11434/api/chat"}, True),
        ({"OLLAMA_API_KEY": "secret"}, True),
        ({"OLLAMA_ENABLED": "false", "OLLAMA_API_KEY": "secret"}, False),
    ],
)
def test_ollama_requires_opt_in(config, configured):
    assert (resolve("ollama", config) is not None) is configured


def test_ollama_does_not_need_credential():
    runtime = resolve("ollama", {"OLLAMA_ENABLED": "true"})

    assert runtime.api_key == ""
    assert runtime.endpoint == "http://localhost:11434/api/chat"


def test_resolve_chain_preserves_chain_order():
    config = {"GEMINI_API_KEY": "g", "GROQ_API_KEY": "q", "COHERE_API_KEY": "c"}

    assert [r.name for r in resolve_chain("safe", config)] == ["gemini", "groq", "cohere"]
    assert [r.name for r in resolve_chain("balanced", config)] == ["groq", "gemini", "cohere"]


def test_list_configured_providers_reports_union_once():
    config = {"GROQ_API_KEY": "q", "GEMINI_API_KEY": "g", "OLLAMA_ENABLED": "true"}

    providers = list_configured_providers(config)

    assert [p.name for p in providers] == ["gemini", "groq", "ollama"]
    assert providers[2].family is FormatFamily.OLLAMA_CHAT
    assert providers[0].model == "gemini-2.0-flash"


def test_providers_config_flattens_environment(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "from-env")
    monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "acc")
    monkeypatch.setenv("COHERE_API_KEY", "   ")

    mapping = ProvidersConfig(_env_file=None).as_mapping()

    assert mapping["GROQ_API_KEY"] == "from-env"
    assert mapping["CLOUDFLARE_ACCOUNT_ID"] == "acc"
    assert "COHERE_API_KEY" not in mapping
