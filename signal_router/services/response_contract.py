"""Pydantic model and sanitizer for recommendation JSON returned by LLMs.

Every provider's raw text runs through ``parse_recommendation`` so callers
always receive a fully populated ``Recommendation`` no matter how sloppy the
model output was.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

MAX_LIST_ITEMS = 10
MAX_FALLBACK_EVIDENCE = 8

DEFAULT_NAME = "Signal-Driven Recommendation"
DEFAULT_PROBLEM = (
    "Based on current signals, users have unresolved friction that should be prioritized."
)
DEFAULT_UI = ("Improve the primary user flow for the highest-friction moments.",)
DEFAULT_DATA = ("Add tracking for recommendation impact and outcome changes.",)
DEFAULT_WORKFLOW = (
    "Define iteration goals -> implement update -> measure behavioral change.",
)
DEFAULT_TASKS = (
    "Draft implementation scope and acceptance criteria.",
    "Implement targeted UX and workflow updates.",
    "Instrument impact metrics and validate behavior shift.",
)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class ResponseContractError(RuntimeError):
    """Raised when model output cannot be turned into a recommendation."""


class NoJsonFoundError(ResponseContractError):
    """The model output contained nothing resembling a JSON object."""


class InvalidJsonError(ResponseContractError):
    """The extracted JSON candidate failed to parse."""


def _to_bounded_int(value: Any, lower: int, upper: int) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(number):
        return None
    # Round half up rather than to even.
    return max(lower, min(upper, math.floor(number + 0.5)))


class Recommendation(BaseModel):
    name: str = DEFAULT_NAME
    problem: str = DEFAULT_PROBLEM
    ui: list[str] = Field(default_factory=lambda: list(DEFAULT_UI))
    data: list[str] = Field(default_factory=lambda: list(DEFAULT_DATA))
    workflow: list[str] = Field(default_factory=lambda: list(DEFAULT_WORKFLOW))
    tasks: list[str] = Field(default_factory=lambda: list(DEFAULT_TASKS))
    evidence: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    confidence: Optional[int] = None
    score: Optional[int] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value: Any) -> Optional[int]:
        return _to_bounded_int(value, 1, 99)

    @field_validator("score", mode="before")
    @classmethod
    def normalize_score(cls, value: Any) -> Optional[int]:
        return _to_bounded_int(value, 1, 100)


def extract_json_text(raw_text: str | None) -> str | None:
    """Pull the most likely JSON object out of free-form model output."""

    raw = (raw_text or "").strip()
    if not raw:
        return None
    if raw.startswith("{") and raw.endswith("}"):
        return raw

    fenced = _FENCED_BLOCK.search(raw)
    if fenced and fenced.group(1).strip():
        return fenced.group(1).strip()

    start = raw.find("{")
    end = raw.rfind("}")
    if start != -1 and end > start:
        return raw[start : end + 1]
    return None


def _item_text(item: Any) -> str:
    if item is None or item is False:
        return ""
    if isinstance(item, (dict, list)):
        return json.dumps(item, ensure_ascii=False)
    return str(item).strip()


def _coerce_list(value: Any, fallback: Sequence[str]) -> list[str]:
    """Trimmed, non-empty, capped strings; ``fallback`` when nothing survives."""

    if isinstance(value, list):
        items = [text for text in (_item_text(item) for item in value) if text]
        if items:
            return items[:MAX_LIST_ITEMS]
    return [str(item) for item in fallback][:MAX_LIST_ITEMS]


def _coerce_text(value: Any, fallback: str) -> str:
    if value is None or isinstance(value, (dict, list)):
        return fallback
    return str(value).strip() or fallback


def sanitize_recommendation(
    raw: Any,
    *,
    themes: Sequence[str] = (),
    top_signals: Sequence[str] = (),
) -> Recommendation:
    """Build a complete ``Recommendation`` from parsed model output.

    ``themes`` and ``top_signals`` come from the request context and back
    the ``themes`` and ``evidence`` fields when the model omits them.
    """

    payload: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    return Recommendation(
        name=_coerce_text(payload.get("name"), DEFAULT_NAME),
        problem=_coerce_text(payload.get("problem"), DEFAULT_PROBLEM),
        ui=_coerce_list(payload.get("ui"), DEFAULT_UI),
        data=_coerce_list(payload.get("data"), DEFAULT_DATA),
        workflow=_coerce_list(payload.get("workflow"), DEFAULT_WORKFLOW),
        tasks=_coerce_list(payload.get("tasks"), DEFAULT_TASKS),
        evidence=_coerce_list(
            payload.get("evidence"), list(top_signals)[:MAX_FALLBACK_EVIDENCE]
        ),
        themes=_coerce_list(payload.get("themes"), themes),
        confidence=payload.get("confidence"),
        score=payload.get("score"),
    )


def parse_recommendation(
    raw_text: str,
    *,
    themes: Sequence[str] = (),
    top_signals: Sequence[str] = (),
) -> Recommendation:
    """Extract, parse and sanitize model output in one step."""

    json_text = extract_json_text(raw_text)
    if json_text is None:
        raise NoJsonFoundError("model response did not contain JSON")
    try:
        data = json.loads(json_text)
    except ValueError as exc:
        # JSONDecodeError, and integers past the int digit limit.
        raise InvalidJsonError(f"invalid JSON response: {exc}") from exc
    return sanitize_recommendation(data, themes=themes, top_signals=top_signals)


__all__ = [
    "DEFAULT_NAME",
    "DEFAULT_PROBLEM",
    "InvalidJsonError",
    "NoJsonFoundError",
    "Recommendation",
    "ResponseContractError",
    "extract_json_text",
    "parse_recommendation",
    "sanitize_recommendation",
]
