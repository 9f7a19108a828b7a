"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from signal_router.config.settings import ProvidersConfig, settings
from signal_router.services import ModelRouter


def get_model_router(request: Request) -> ModelRouter:
    """Return the router created once at application startup."""

    return request.app.state.model_router


def get_provider_configuration() -> dict[str, str]:
    """Re-read provider configuration so key changes apply without a restart."""

    return ProvidersConfig().as_mapping()


async def enforce_body_limit(request: Request) -> None:
    """Reject request bodies larger than the configured byte cap."""

    body = await request.body()
    if len(body) > settings.router.max_body_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload: Request body too large.",
        )


ModelRouterDep = Annotated[ModelRouter, Depends(get_model_router)]
ProviderConfigDep = Annotated[dict[str, str], Depends(get_provider_configuration)]


__all__ = [
    "ModelRouterDep",
    "ProviderConfigDep",
    "enforce_body_limit",
    "get_model_router",
    "get_provider_configuration",
]
