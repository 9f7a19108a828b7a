"""Turn raw signal lines into the prompt-ready recommendation context.

Given the product question, the requested mode, the signal lines and a few
prior runs, we emit:
* A constant system prompt describing the strategist persona and the strict
  JSON contract.
* A user prompt with counts, source breakdown, themes, history highlights
  and the most severe signals.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .signal_analyzer import (
    extract_themes,
    normalize_line,
    severity_score,
    source_breakdown,
)
from .types import RecommendationMode

DEFAULT_QUESTION = "What should we build next?"

MAX_SIGNALS = 240
MAX_THEMES = 8
MAX_TOP_SIGNALS = 12
MAX_HISTORY = 3

SYSTEM_PROMPT = "\n".join(
    [
        "You are a senior AI product strategist for a tool called Cursor for Product Managers.",
        "Goal: convert raw customer/usage/market signals into a concrete feature recommendation.",
        "You must return STRICT JSON only (no markdown, no prose around JSON).",
        "JSON schema:",
        "{",
        '  "name": "string",',
        '  "problem": "string",',
        '  "ui": ["string", "..."],',
        '  "data": ["string", "..."],',
        '  "workflow": ["string", "..."],',
        '  "tasks": ["string", "..."],',
        '  "evidence": ["string", "..."],',
        '  "themes": ["string", "..."],',
        '  "confidence": 0-100 number',
        "}",
        "Requirements:",
        "- Ground the output in provided signals.",
        "- Keep recommendations implementation-ready and specific.",
        "- Keep UI/data/workflow/task arrays non-empty.",
    ]
)


@dataclass(frozen=True)
class RecommendationContext:
    """Immutable, prompt-ready view of one recommendation request."""

    question: str
    mode: RecommendationMode
    signals: tuple[str, ...]
    themes: tuple[str, ...]
    source_breakdown: Mapping[str, int] = field(hash=False)
    top_signals: tuple[str, ...]
    severity_signal_count: int
    history_highlights: tuple[str, ...]
    system_prompt: str
    user_prompt: str


def _summarize_history(history: Sequence[Any] | None) -> list[str]:
    """Render the first few prior runs as ``"1. name (when)"`` lines."""

    if not history:
        return []

    highlights: list[str] = []
    for idx, item in enumerate(list(history)[:MAX_HISTORY]):
        entry = item if isinstance(item, Mapping) else {}
        top_name = normalize_line(entry.get("topName")) or "unknown"
        when = normalize_line(entry.get("timestamp")) or "recent"
        highlights.append(f"{idx + 1}. {top_name} ({when})")
    return highlights


def _rank_by_severity(signals: Sequence[str]) -> tuple[list[str], int]:
    """Return the top signals (stable, most severe first) and the severe count."""

    scored = [(line, severity_score(line)) for line in signals]
    ranked = sorted(scored, key=lambda item: item[1], reverse=True)
    severe = sum(1 for _, score in scored if score > 0)
    return [line for line, _ in ranked[:MAX_TOP_SIGNALS]], severe


def _render_user_prompt(
    *,
    question: str,
    mode: RecommendationMode,
    signal_count: int,
    breakdown: Mapping[str, int],
    severity_signal_count: int,
    themes: Sequence[str],
    history_highlights: Sequence[str],
    top_signals: Sequence[str],
) -> str:
    lines = [
        f"Question: {question}",
        f"Mode: {mode.value}",
        f"Signal count: {signal_count}",
        "Source breakdown: " + json.dumps(dict(breakdown), separators=(",", ":")),
        f"Severity-tagged signal count: {severity_signal_count}",
        "Top themes: " + (", ".join(themes) if themes else "n/a"),
        "Recent run highlights: "
        + (" | ".join(history_highlights) if history_highlights else "n/a"),
        "Signals:",
    ]
    lines.extend(f"{idx + 1}. {line}" for idx, line in enumerate(top_signals))
    return "\n".join(lines)


def build_context(
    question: object,
    mode: object,
    signals: Sequence[object] | None,
    history: Sequence[Any] | None = None,
) -> RecommendationContext:
    """Compose the recommendation context and both prompts.

    Blank signal lines are dropped and only the first ``MAX_SIGNALS`` are
    kept, in source order. Output depends only on the arguments.
    """

    resolved_question = normalize_line(question) or DEFAULT_QUESTION
    resolved_mode = RecommendationMode.parse(mode)

    signal_lines: list[str] = []
    for raw in signals or ():
        line = normalize_line(raw)
        if not line:
            continue
        signal_lines.append(line)
        if len(signal_lines) >= MAX_SIGNALS:
            break

    themes = extract_themes(signal_lines, MAX_THEMES)
    breakdown = source_breakdown(signal_lines)
    top_signals, severity_signal_count = _rank_by_severity(signal_lines)
    history_highlights = _summarize_history(history)

    user_prompt = _render_user_prompt(
        question=resolved_question,
        mode=resolved_mode,
        signal_count=len(signal_lines),
        breakdown=breakdown,
        severity_signal_count=severity_signal_count,
        themes=themes,
        history_highlights=history_highlights,
        top_signals=top_signals,
    )

    return RecommendationContext(
        question=resolved_question,
        mode=resolved_mode,
        signals=tuple(signal_lines),
        themes=tuple(themes),
        source_breakdown=MappingProxyType(breakdown),
        top_signals=tuple(top_signals),
        severity_signal_count=severity_signal_count,
        history_highlights=tuple(history_highlights),
        system_prompt=SYSTEM_PROMPT,
        user_prompt=user_prompt,
    )


__all__ = [
    "DEFAULT_QUESTION",
    "MAX_SIGNALS",
    "RecommendationContext",
    "SYSTEM_PROMPT",
    "build_context",
]
