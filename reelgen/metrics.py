"""Prometheus-style metrics helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram, generate_latest

# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

GENERATIONS_TOTAL = Counter(
    "reelgen_generations_total",
    "Videos handed back to callers",
    ["provider", "provenance"],  # provenance: genuine | synthetic
)

GENERATION_FAILURES = Counter(
    "reelgen_generation_failures_total",
    "Generations that fell back to a placeholder",
    ["provider", "error_kind"],
)

GENERATION_TIME = Histogram(
    "reelgen_generation_seconds",
    "Wall-clock time of one generate() call",
    ["provider"],
    buckets=[1, 5, 10, 30, 60, 120, 300, 600],
)

# ---------------------------------------------------------------------------
# Long-running operations
# ---------------------------------------------------------------------------

POLL_ATTEMPTS = Histogram(
    "reelgen_poll_attempts",
    "Status queries made per long-running operation",
    ["provider"],
    buckets=[1, 2, 5, 10, 20, 30],
)

# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------

PROVIDER_SWITCHES = Counter(
    "reelgen_provider_switches_total",
    "Explicit active-provider changes",
    ["to_provider"],
)


def metrics_text() -> bytes:
    """Return Prometheus exposition text."""
    return generate_latest()
