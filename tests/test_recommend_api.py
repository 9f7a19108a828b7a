"""Integration-style tests for the recommendation and router status endpoints."""

from __future__ import annotations

import json
from pathlib import Path
import sys

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from signal_router.config.settings import settings  # noqa: E402
from signal_router.controllers.dependencies import get_provider_configuration  # noqa: E402
from signal_router.main import create_app  # noqa: E402
from signal_router.services import ModelRouter, ProviderHttpClient, RateLimitTracker  # noqa: E402

SIGNALS = [
    "Interview: users abandon checkout at 40% rate",
    "Usage: latency spikes on mobile",
]


class FakeProvider:
    """Stand-in for every backend: answers with a canned status and body."""

    def __init__(self) -> None:
        self.status_code = 200
        self.body: object = {
            "choices": [
                {"message": {"content": json.dumps({"name": "Checkout rescue", "confidence": 88})}}
            ]
        }
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def configuration() -> dict[str, str]:
    return {"GROQ_API_KEY": "gsk"}


@pytest.fixture
def client(provider, configuration):
    """App wired to a mocked transport and an in-test provider configuration."""

    model_router = ModelRouter(
        tracker=RateLimitTracker(),
        http_client=ProviderHttpClient(timeout=5, transport=httpx.MockTransport(provider)),
    )
    app = create_app(model_router=model_router)
    app.dependency_overrides[get_provider_configuration] = lambda: configuration

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["ok"] is True


def test_router_status_lists_configured_providers(client, configuration):
    configuration["OLLAMA_ENABLED"] = "true"

    response = client.get("/api/router/status")

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "configuredProviders": [
            {"name": "groq", "model": "llama-3.3-70b-versatile", "type": "openai-chat"},
            {"name": "ollama", "model": "llama3.1", "type": "ollama-chat"},
        ],
    }


def test_recommend_happy_path(client, provider):
    response = client.post(
        "/api/recommend",
        json={"question": "What next?", "mode": "fast", "signals": SIGNALS},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["provider"] == "groq"
    assert payload["mode"] == "fast"
    assert payload["recommendation"]["name"] == "Checkout rescue"
    assert payload["recommendation"]["confidence"] == 88
    assert payload["recommendation"]["ui"]
    assert payload["context"]["signalCount"] == 2
    assert payload["context"]["sourceBreakdown"]["interview"] == 1
    assert provider.calls == 1


def test_recommend_requires_a_signal(client, provider):
    response = client.post("/api/recommend", json={"signals": ["   ", ""]})

    assert response.status_code == 400
    assert response.json() == {
        "ok": False,
        "error": "At least one signal line is required.",
        "code": None,
    }
    assert provider.calls == 0


def test_recommend_without_providers_is_unavailable(client, configuration):
    configuration.clear()

    response = client.post("/api/recommend", json={"signals": SIGNALS})

    assert response.status_code == 503
    assert response.json()["code"] == "NO_PROVIDER_CONFIGURED"


def test_recommend_when_every_provider_fails(client, provider):
    provider.status_code = 500
    provider.body = {"error": "model overloaded"}

    response = client.post("/api/recommend", json={"signals": SIGNALS})

    assert response.status_code == 502
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "ALL_PROVIDERS_FAILED"
    assert payload["error"].startswith("All providers failed. [groq] 500 - ")


def test_metrics_expose_router_counters(client):
    client.post("/api/recommend", json={"signals": SIGNALS})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert 'router_provider_attempts_total{provider="groq",outcome="success"}' in response.text
    assert "http_requests_in_progress" in response.text


def test_unparsable_body_is_a_bad_request(client, provider):
    response = client.post(
        "/api/recommend",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["ok"] is False
    assert payload["error"].startswith("Invalid JSON payload: ")
    assert provider.calls == 0


def test_non_string_question_and_mode_are_coerced(client, provider):
    response = client.post(
        "/api/recommend",
        json={"question": 42, "mode": ["fast"], "signals": []},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "At least one signal line is required."

    response = client.post(
        "/api/recommend",
        json={"question": 42, "mode": 7, "signals": SIGNALS},
    )

    assert response.status_code == 200
    assert response.json()["mode"] == "balanced"


def test_oversized_body_is_rejected(client, provider, monkeypatch):
    monkeypatch.setattr(settings.router, "max_body_bytes", 64)

    response = client.post("/api/recommend", json={"signals": SIGNALS * 4})

    assert response.status_code == 400
    assert response.json() == {
        "ok": False,
        "error": "Invalid JSON payload: Request body too large.",
        "code": None,
    }
    assert provider.calls == 0
