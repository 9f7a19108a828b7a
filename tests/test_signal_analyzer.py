"""Unit tests for signal tokenizing, source classification and severity scoring."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from signal_router.services.signal_analyzer import (  # noqa: E402
    SourceCategory,
    classify_source,
    extract_themes,
    severity_score,
    source_breakdown,
    tokenize,
)


def test_tokenize_drops_short_tokens_and_stop_words():
    tokens = tokenize("The checkout FLOW is slow, users hate it!!")

    assert tokens == ["the", "checkout", "flow", "slow", "hate"]


def test_tokenize_splits_on_any_non_alphanumeric_run():
    assert tokenize("api--latency__p95/mobile") == ["api", "latency", "p95", "mobile"]


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Interview: onboarding is confusing", SourceCategory.INTERVIEW),
        ("USAGE: exports dropped last week", SourceCategory.USAGE),
        ("market: competitor shipped bulk edit", SourceCategory.MARKET),
        ("survey.csv: row 14 mentions pricing", SourceCategory.UPLOAD),
        ("Interview notes.md: asked for dark mode", SourceCategory.UPLOAD),
        ("report.json:missing space", SourceCategory.OTHER),
        ("random note from slack", SourceCategory.OTHER),
    ],
)
def test_classify_source(line, expected):
    assert classify_source(line) is expected


def test_prefix_rules_win_over_upload_pattern():
    assert classify_source("usage: export.csv: 40 rows failed") is SourceCategory.USAGE


def test_severity_counts_each_term_once():
    assert severity_score("Crash crash CRASH") == 1
    assert severity_score("crash and error during checkout") == 2
    assert severity_score("weekly blocker review") == 1


def test_severity_adds_one_for_percentage():
    assert severity_score("40% drop in activation") == 2
    assert severity_score("no numbers here") == 0


def test_severity_is_monotonic_when_terms_are_appended():
    base = "checkout feels slow"
    with_new_term = base + " and latency spikes"
    with_repeat = with_new_term + " so slow"

    assert severity_score(with_new_term) >= severity_score(base)
    assert severity_score(with_repeat) == severity_score(with_new_term)


def test_extract_themes_ranks_by_count_then_first_seen():
    signals = ["alpha beta", "beta gamma", "delta alpha beta"]

    assert extract_themes(signals, 8) == ["beta", "alpha", "gamma", "delta"]
    assert extract_themes(signals, 2) == ["beta", "alpha"]


def test_source_breakdown_has_every_bucket_and_sums_to_signal_count():
    signals = [
        "interview: a",
        "usage: b",
        "usage: c",
        "data.txt: d",
        "e",
    ]

    breakdown = source_breakdown(signals)

    assert breakdown == {"interview": 1, "usage": 2, "market": 0, "upload": 1, "other": 1}
    assert sum(breakdown.values()) == len(signals)
