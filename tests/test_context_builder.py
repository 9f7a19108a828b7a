"""Tests for recommendation context assembly and prompt rendering."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from signal_router.services.context_builder import (  # noqa: E402
    DEFAULT_QUESTION,
    MAX_SIGNALS,
    SYSTEM_PROMPT,
    build_context,
)
from signal_router.services.types import RecommendationMode  # noqa: E402

CHECKOUT_SIGNALS = [
    "Interview: users abandon checkout at 40% rate",
    "Usage: latency spikes on mobile",
]


def test_checkout_scenario_breakdown_and_severity():
    context = build_context("What next?", "balanced", CHECKOUT_SIGNALS, [])

    assert context.source_breakdown == {
        "interview": 1,
        "usage": 1,
        "market": 0,
        "upload": 0,
        "other": 0,
    }
    assert context.severity_signal_count == 2
    assert context.mode is RecommendationMode.BALANCED
    assert context.themes == (
        "interview",
        "abandon",
        "checkout",
        "rate",
        "usage",
        "latency",
        "spikes",
        "mobile",
    )


def test_rebuilding_from_identical_inputs_is_identical():
    history = [{"topName": "Bulk edit", "timestamp": "2024-05-01"}]

    first = build_context("Q", "safe", CHECKOUT_SIGNALS, history)
    second = build_context("Q", "safe", list(CHECKOUT_SIGNALS), list(history))

    assert first == second
    assert first.user_prompt == second.user_prompt
    assert first.system_prompt == SYSTEM_PROMPT


def test_context_is_read_only_and_hashable():
    context = build_context("Q", "fast", CHECKOUT_SIGNALS)

    with pytest.raises(TypeError):
        context.source_breakdown["interview"] = 99

    assert context.source_breakdown["interview"] == 1
    assert hash(context) == hash(build_context("Q", "fast", CHECKOUT_SIGNALS))


def test_user_prompt_layout():
    context = build_context("Where do we invest?", "fast", CHECKOUT_SIGNALS, [])

    lines = context.user_prompt.split("\n")
    assert lines[0] == "Question: Where do we invest?"
    assert lines[1] == "Mode: fast"
    assert lines[2] == "Signal count: 2"
    assert lines[3] == (
        'Source breakdown: {"interview":1,"usage":1,"market":0,"upload":0,"other":0}'
    )
    assert lines[4] == "Severity-tagged signal count: 2"
    assert lines[6] == "Recent run highlights: n/a"
    assert lines[7] == "Signals:"
    assert lines[8] == "1. Interview: users abandon checkout at 40% rate"
    assert lines[9] == "2. Usage: latency spikes on mobile"


def test_defaults_for_blank_question_and_unknown_mode():
    context = build_context("   ", "turbo", ["plain note"], None)

    assert context.question == DEFAULT_QUESTION
    assert context.mode is RecommendationMode.BALANCED
    assert "Mode: balanced" in context.user_prompt


def test_signals_are_trimmed_filtered_and_capped():
    raw = ["  ", None, " first "] + [f"line {i}" for i in range(300)]

    context = build_context("Q", "balanced", raw, [])

    assert len(context.signals) == MAX_SIGNALS
    assert context.signals[0] == "first"
    assert context.signals[1] == "line 0"
    assert sum(context.source_breakdown.values()) == MAX_SIGNALS


def test_top_signals_are_severity_ranked_and_stable():
    signals = [f"note {i}" for i in range(15)]
    signals[3] = "note 3 crash during sync"
    signals[7] = "note 7 error and crash on save"
    signals[9] = "note 9 slow"

    context = build_context("Q", "balanced", signals, [])

    assert len(context.top_signals) == 12
    assert context.top_signals[:3] == (signals[7], signals[3], signals[9])
    assert context.top_signals[3:6] == ("note 0", "note 1", "note 2")
    assert context.severity_signal_count == 3


def test_history_highlights_are_capped_and_defaulted():
    history = [
        {"topName": "Bulk edit", "timestamp": "2024-05-01"},
        {},
        "not a mapping",
        {"topName": "Ignored", "timestamp": "later"},
    ]

    context = build_context("Q", "balanced", ["x"], history)

    assert context.history_highlights == (
        "1. Bulk edit (2024-05-01)",
        "2. unknown (recent)",
        "3. unknown (recent)",
    )
    assert (
        "Recent run highlights: 1. Bulk edit (2024-05-01) | 2. unknown (recent)"
        in context.user_prompt
    )


def test_empty_themes_render_as_na():
    context = build_context("Q", "balanced", ["a b"], [])

    assert context.themes == ()
    assert "Top themes: n/a" in context.user_prompt
