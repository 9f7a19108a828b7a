"""Lexical scoring helpers for raw product-signal lines.

Each signal line is a short piece of evidence such as an interview quote, a
usage log excerpt, a market note or a line lifted from an uploaded file.
These helpers classify where a line came from, how alarming it reads, and
which tokens recur across a batch of lines.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Sequence


class SourceCategory(str, Enum):
    """Origin buckets reported in the source breakdown."""

    INTERVIEW = "interview"
    USAGE = "usage"
    MARKET = "market"
    UPLOAD = "upload"
    OTHER = "other"


STOP_WORDS = frozenset(
    {
        "about",
        "above",
        "after",
        "again",
        "also",
        "because",
        "before",
        "being",
        "between",
        "could",
        "every",
        "from",
        "have",
        "into",
        "just",
        "more",
        "most",
        "over",
        "that",
        "their",
        "there",
        "these",
        "this",
        "those",
        "very",
        "what",
        "when",
        "where",
        "which",
        "with",
        "would",
        "users",
        "user",
        "team",
        "teams",
    }
)

SEVERITY_TERMS: tuple[str, ...] = (
    "incident",
    "error",
    "crash",
    "block",
    "failure",
    "urgent",
    "drop",
    "churn",
    "latency",
    "slow",
    "risk",
)

MIN_TOKEN_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")
_PERCENTAGE = re.compile(r"\d+%")
_UPLOAD_MARKER = re.compile(r"\.(?:json|csv|txt|md):\s")

# Checked in order; the first matching prefix wins.
_SOURCE_PREFIXES: tuple[tuple[str, SourceCategory], ...] = (
    ("interview:", SourceCategory.INTERVIEW),
    ("usage:", SourceCategory.USAGE),
    ("market:", SourceCategory.MARKET),
)


def normalize_line(text: object) -> str:
    """Coerce ``text`` to a trimmed string (``None`` becomes empty)."""

    if text is None:
        return ""
    return str(text).strip()


def tokenize(text: str) -> list[str]:
    """Lowercase ``text`` and return its content-bearing tokens."""

    lowered = normalize_line(text).lower()
    return [
        token
        for token in _TOKEN_SPLIT.split(lowered)
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def classify_source(line: str) -> SourceCategory:
    """Return the source bucket a signal line belongs to."""

    lowered = normalize_line(line).lower()
    for prefix, category in _SOURCE_PREFIXES:
        if lowered.startswith(prefix):
            return category
    if _UPLOAD_MARKER.search(lowered):
        return SourceCategory.UPLOAD
    return SourceCategory.OTHER


def severity_score(line: str) -> int:
    """Count distinct severity terms in ``line``, plus one for a percentage."""

    lowered = normalize_line(line).lower()
    score = sum(1 for term in SEVERITY_TERMS if term in lowered)
    if _PERCENTAGE.search(lowered):
        score += 1
    return score


def extract_themes(signals: Iterable[str], limit: int) -> list[str]:
    """Return the ``limit`` most frequent tokens across ``signals``.

    Ties keep the order in which tokens were first seen.
    """

    counts: dict[str, int] = {}
    for signal in signals:
        for token in tokenize(signal):
            counts[token] = counts.get(token, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [token for token, _ in ranked[: max(limit, 0)]]


def empty_breakdown() -> dict[str, int]:
    return {category.value: 0 for category in SourceCategory}


def source_breakdown(signals: Sequence[str]) -> dict[str, int]:
    """Count signals per source bucket; every bucket is always present."""

    breakdown = empty_breakdown()
    for line in signals:
        breakdown[classify_source(line).value] += 1
    return breakdown


__all__ = [
    "SEVERITY_TERMS",
    "STOP_WORDS",
    "SourceCategory",
    "classify_source",
    "empty_breakdown",
    "extract_themes",
    "normalize_line",
    "severity_score",
    "source_breakdown",
    "tokenize",
]
