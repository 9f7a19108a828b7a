"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .recommend import (
    ContextSummary,
    ProviderStatus,
    RecommendRequest,
    RecommendResponse,
    RouterStatusResponse,
)

__all__ = [
    "ContextSummary",
    "ErrorResponse",
    "ProviderStatus",
    "RecommendRequest",
    "RecommendResponse",
    "RouterStatusResponse",
]
