"""Schemas for recommendation and router status endpoints."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

from signal_router.services import Recommendation
from signal_router.services.signal_analyzer import normalize_line


class RecommendRequest(BaseModel):
    question: str = ""
    mode: str = ""
    signals: List[Any] = Field(default_factory=list)
    history: List[Any] = Field(default_factory=list)

    @field_validator("question", "mode", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return normalize_line(value)

    @field_validator("signals", "history", mode="before")
    @classmethod
    def ensure_list(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []


class ContextSummary(BaseModel):
    signalCount: int
    themes: List[str]
    sourceBreakdown: Dict[str, int]


class RecommendResponse(BaseModel):
    ok: bool = True
    provider: str
    model: str
    mode: str
    recommendation: Recommendation
    context: ContextSummary


class ProviderStatus(BaseModel):
    name: str
    model: str
    type: str


class RouterStatusResponse(BaseModel):
    ok: bool = True
    configuredProviders: List[ProviderStatus]
