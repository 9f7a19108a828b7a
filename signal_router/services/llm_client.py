"""HTTP wire adapters for every supported LLM format family.

Each adapter renders the context's system/user prompts into its family's
request envelope and pulls the raw answer text back out of the response.
Parsing that text into a recommendation is left to the router so all
families share one sanitizer.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional
from urllib.parse import quote

import httpx

from .context_builder import RecommendationContext
from .provider_registry import FormatFamily, ProviderRuntime

logger = logging.getLogger(__name__)


class ProviderCallError(RuntimeError):
    """Raised when a single provider attempt fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status: Optional[int] = None,
        body_text: str = "",
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status
        self.body_text = body_text


class ProviderHttpError(ProviderCallError):
    """The backend answered with a non-2xx status."""


class ProviderTransportError(ProviderCallError):
    """The request never produced an HTTP response (timeout, DNS, reset...)."""


class EmptyOutputError(ProviderCallError):
    """The backend answered but the answer text was blank."""


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.2
    max_tokens: int = 1200


class ProviderHttpClient:
    """POST JSON to provider endpoints with a per-call timeout."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def post_json(
        self,
        provider: str,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
        params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Return the decoded JSON body (``None`` when it is not JSON)."""

        async with httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(
                    url,
                    headers=dict(headers),
                    params=dict(params) if params else None,
                    json=dict(payload),
                )
            except httpx.HTTPError as exc:
                message = str(exc) or exc.__class__.__name__
                raise ProviderTransportError(provider, message) from exc

        text = response.text
        try:
            data = json.loads(text) if text else None
        except ValueError:
            data = None

        if not response.is_success:
            body_text = text
            if isinstance(data, Mapping) and data.get("error"):
                body_text = json.dumps(data["error"], ensure_ascii=False)
            raise ProviderHttpError(
                provider,
                body_text or "request failed",
                status=response.status_code,
                body_text=body_text,
            )
        return data


def build_messages(context: RecommendationContext) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": context.system_prompt},
        {"role": "user", "content": context.user_prompt},
    ]


def build_prompt_text(context: RecommendationContext) -> str:
    """Single-prompt rendering for families without a system role."""

    return context.system_prompt + "\n\n" + context.user_prompt


def _bearer_headers(api_key: str) -> dict[str, str]:
    headers = {"content-type": "application/json"}
    if api_key:
        headers["authorization"] = f"Bearer {api_key}"
    return headers


def _dig(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning ``None`` on the first miss."""

    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, Mapping):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
    return current


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


async def _call_openai_chat(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions,
) -> str:
    data = await client.post_json(
        runtime.name,
        runtime.endpoint,
        headers=_bearer_headers(runtime.api_key),
        payload={
            "model": runtime.model,
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
            "messages": build_messages(context),
        },
    )
    return _as_text(_dig(data, "choices", 0, "message", "content"))


async def _call_gemini(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions,
) -> str:
    base = runtime.endpoint.rstrip("/")
    url = f"{base}/{quote(runtime.model, safe='')}:generateContent"
    data = await client.post_json(
        runtime.name,
        url,
        headers={"content-type": "application/json"},
        params={"key": runtime.api_key},
        payload={
            "contents": [
                {"role": "user", "parts": [{"text": build_prompt_text(context)}]},
            ],
            "generationConfig": {
                "temperature": options.temperature,
                "maxOutputTokens": options.max_tokens,
            },
        },
    )
    parts = _dig(data, "candidates", 0, "content", "parts")
    if not isinstance(parts, list):
        return ""
    return "\n".join(_as_text(_dig(part, "text")) for part in parts)


async def _call_cohere(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions,
) -> str:
    data = await client.post_json(
        runtime.name,
        runtime.endpoint,
        headers=_bearer_headers(runtime.api_key),
        payload={
            "model": runtime.model,
            "temperature": options.temperature,
            "messages": build_messages(context),
        },
    )
    text = _dig(data, "text")
    if isinstance(text, str):
        return text
    content = _dig(data, "message", "content")
    if not isinstance(content, list):
        return ""
    return "\n".join(_as_text(_dig(item, "text")) for item in content)


async def _call_cloudflare(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions,
) -> str:
    base = runtime.endpoint.rstrip("/")
    url = (
        f"{base}/{quote(runtime.account_id, safe='')}"
        f"/ai/run/{quote(runtime.model, safe='')}"
    )
    data = await client.post_json(
        runtime.name,
        url,
        headers=_bearer_headers(runtime.api_key),
        payload={
            "messages": build_messages(context),
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        },
    )
    result = _dig(data, "result")
    if isinstance(result, str):
        return result
    return _as_text(_dig(result, "response")) or _as_text(_dig(result, "result"))


async def _call_huggingface(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions,
) -> str:
    base = runtime.endpoint.rstrip("/")
    data = await client.post_json(
        runtime.name,
        f"{base}/{runtime.model}",
        headers=_bearer_headers(runtime.api_key),
        payload={
            "inputs": build_prompt_text(context),
            "parameters": {
                "temperature": options.temperature,
                "max_new_tokens": options.max_tokens,
                "return_full_text": False,
            },
            "options": {"wait_for_model": True},
        },
    )
    if isinstance(data, list):
        return _as_text(_dig(data, 0, "generated_text"))
    return _as_text(_dig(data, "generated_text"))


async def _call_ollama(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions,
) -> str:
    data = await client.post_json(
        runtime.name,
        runtime.endpoint,
        headers=_bearer_headers(runtime.api_key),
        payload={
            "model": runtime.model,
            "stream": False,
            "messages": build_messages(context),
            "options": {"temperature": options.temperature},
        },
    )
    return _as_text(_dig(data, "message", "content"))


WireAdapter = Callable[
    [ProviderRuntime, RecommendationContext, ProviderHttpClient, GenerationOptions],
    Awaitable[str],
]

WIRE_ADAPTERS: Mapping[FormatFamily, WireAdapter] = {
    FormatFamily.OPENAI_CHAT: _call_openai_chat,
    FormatFamily.GEMINI: _call_gemini,
    FormatFamily.COHERE: _call_cohere,
    FormatFamily.CLOUDFLARE_RUN: _call_cloudflare,
    FormatFamily.HUGGINGFACE_INFERENCE: _call_huggingface,
    FormatFamily.OLLAMA_CHAT: _call_ollama,
}


async def invoke_provider(
    runtime: ProviderRuntime,
    context: RecommendationContext,
    client: ProviderHttpClient,
    options: GenerationOptions | None = None,
) -> str:
    """Call ``runtime`` and return its raw answer text (never blank)."""

    adapter = WIRE_ADAPTERS[runtime.family]
    raw_text = await adapter(runtime, context, client, options or GenerationOptions())
    if not raw_text.strip():
        raise EmptyOutputError(runtime.name, "empty model output")
    logger.debug("Provider %s returned %s characters", runtime.name, len(raw_text))
    return raw_text


__all__ = [
    "EmptyOutputError",
    "GenerationOptions",
    "ProviderCallError",
    "ProviderHttpClient",
    "ProviderHttpError",
    "ProviderTransportError",
    "WIRE_ADAPTERS",
    "build_messages",
    "build_prompt_text",
    "invoke_provider",
]
