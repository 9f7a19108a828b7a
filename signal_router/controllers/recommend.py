"""Recommendation endpoints.

`POST /api/recommend` builds the signal context, routes it through the
mode's provider chain and returns the sanitized recommendation.
`GET /api/router/status` reports which providers are currently configured.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from signal_router.config.settings import settings
from signal_router.controllers.dependencies import (
    ModelRouterDep,
    ProviderConfigDep,
    enforce_body_limit,
)
from signal_router.services import build_context, list_configured_providers
from signal_router.services.signal_analyzer import normalize_line
from signal_router.views import (
    ContextSummary,
    ErrorResponse,
    ProviderStatus,
    RecommendRequest,
    RecommendResponse,
    RouterStatusResponse,
)

router = APIRouter(prefix="/api", tags=["recommend"])

logger = logging.getLogger(__name__)


@router.get("/router/status", response_model=RouterStatusResponse)
async def router_status(configuration: ProviderConfigDep) -> RouterStatusResponse:
    """List providers that resolve under the current configuration."""

    providers = [
        ProviderStatus(name=item.name, model=item.model, type=item.family.value)
        for item in list_configured_providers(configuration)
    ]
    return RouterStatusResponse(configuredProviders=providers)


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    dependencies=[Depends(enforce_body_limit)],
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def recommend(
    payload: RecommendRequest,
    model_router: ModelRouterDep,
    configuration: ProviderConfigDep,
):
    """Generate a feature recommendation from the submitted signals."""

    limits = settings.router
    signals = [line for line in (normalize_line(raw) for raw in payload.signals) if line]
    signals = signals[: limits.max_request_signals]
    if not signals:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error="At least one signal line is required.").model_dump(),
        )

    history = payload.history[: limits.max_request_history]
    context = build_context(payload.question, payload.mode, signals, history)
    logger.info(
        "Recommendation requested mode=%s signals=%s themes=%s",
        context.mode.value,
        len(context.signals),
        ",".join(context.themes),
    )

    # Router errors propagate to the handlers registered in create_app().
    routed = await model_router.route(context.mode, context, configuration)

    return RecommendResponse(
        provider=routed.provider,
        model=routed.model,
        mode=routed.mode.value,
        recommendation=routed.recommendation,
        context=ContextSummary(
            signalCount=len(context.signals),
            themes=list(context.themes),
            sourceBreakdown=dict(context.source_breakdown),
        ),
    )
