"""Prometheus metrics for the Go AI service.

Counters and histograms for the ``/ai/move`` turn pipeline live here so the
bot, the committer path and the HTTP handlers share one set of metric
instances. Labels stay coarse (level, outcome, reason) to keep cardinality
low.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram


AI_MOVE_REQUESTS: Final[Counter] = Counter(
    "ai_move_requests_total",
    "Total number of /ai/move requests, labeled by level and outcome.",
    labelnames=("level", "outcome"),
)

AI_MOVE_LATENCY: Final[Histogram] = Histogram(
    "ai_move_latency_seconds",
    "Latency of one AI turn in seconds, labeled by level.",
    labelnames=("level",),
    buckets=(
        0.01,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.0,
        5.0,
        10.0,
    ),
)

AI_ENGINE_FALLBACKS: Final[Counter] = Counter(
    "ai_engine_fallbacks_total",
    (
        "External engine answers that were discarded in favour of the "
        "heuristic, labeled by reason (error, timeout, illegal)."
    ),
    labelnames=("reason",),
)

AI_TURN_OUTCOMES: Final[Counter] = Counter(
    "ai_turn_outcomes_total",
    "Committed AI turns, labeled by delta outcome (move, resign, reveal, win).",
    labelnames=("outcome",),
)

AI_CANDIDATES_EVALUATED: Final[Histogram] = Histogram(
    "ai_candidates_evaluated",
    "Number of candidate points scored per heuristic turn.",
    buckets=(1, 5, 10, 25, 50, 100, 200, 361),
)

AI_MISTAKES_INJECTED: Final[Counter] = Counter(
    "ai_mistakes_injected_total",
    "Deliberate mistakes chosen by the mistake injector, labeled by level.",
    labelnames=("level",),
)


def level_label(level: int) -> str:
    """Normalise a level into its label value."""
    return str(level)
