"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import ProvidersConfig, settings
from .controllers import recommend
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .services import (
    AllProvidersFailedError,
    GenerationOptions,
    ModelRouter,
    NoProviderConfiguredError,
    ProviderHttpClient,
    RateLimitTracker,
    list_configured_providers,
)
from .views import ErrorResponse

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Stream application logs to stdout and rotating files."""

    logging.getLogger().handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    log_path = Path(settings.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=1_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    middleware_logger = logging.getLogger("signal_router.middleware.structured")
    middleware_logger.handlers.clear()
    middleware_stdout = logging.StreamHandler(sys.stdout)
    middleware_stdout.setFormatter(logging.Formatter("%(message)s"))
    middleware_logger.addHandler(middleware_stdout)
    middleware_logger.setLevel(logging.INFO)
    middleware_logger.propagate = False

    router_log_path = Path(settings.router_log_file)
    router_log_path.parent.mkdir(parents=True, exist_ok=True)
    router_handler = RotatingFileHandler(
        router_log_path,
        maxBytes=500_000,
        backupCount=5,
        encoding="utf-8",
    )
    router_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )
    router_logger = logging.getLogger("signal_router.services.model_router")
    router_logger.handlers.clear()
    router_logger.addHandler(router_handler)
    router_logger.setLevel(logging.INFO)

    noisy_loggers = [
        "httpx",
        "httpcore",
    ]
    for name in noisy_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def build_model_router() -> ModelRouter:
    """Create the process-wide router and its shared rate-limit tracker."""

    router_cfg = settings.router
    return ModelRouter(
        tracker=RateLimitTracker(),
        http_client=ProviderHttpClient(timeout=router_cfg.timeout_seconds),
        options=GenerationOptions(
            temperature=router_cfg.temperature,
            max_tokens=router_cfg.max_tokens,
        ),
    )


def create_app(model_router: ModelRouter | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        description="Product signal recommendation router",
    )
    app.state.model_router = model_router or build_model_router()

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(recommend.router)

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, object]:
        """Health check endpoint."""

        return {
            "ok": True,
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(NoProviderConfiguredError)
    async def no_provider_handler(request: Request, exc: NoProviderConfiguredError):
        return JSONResponse(
            status_code=503,
            content={"ok": False, "code": exc.code, "error": str(exc)},
        )

    @app.exception_handler(AllProvidersFailedError)
    async def all_failed_handler(request: Request, exc: AllProvidersFailedError):
        return JSONResponse(
            status_code=502,
            content={"ok": False, "code": exc.code, "error": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        reason = (first.get("ctx") or {}).get("error") or first.get("msg") or "malformed body"
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=f"Invalid JSON payload: {reason}").model_dump(),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal server error").model_dump(),
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        configured = list_configured_providers(ProvidersConfig().as_mapping())
        logger.info(
            "Configured providers: %s",
            ", ".join(item.name for item in configured) or "none",
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "signal_router.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
