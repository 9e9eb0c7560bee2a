"""Prometheus metrics for classification calls and pipeline runs."""

from prometheus_client import Counter, Histogram

CLASSIFICATION_CALLS = Counter(
    "scenemood_classification_calls_total",
    "External classification calls by provider, tier and outcome",
    ["provider", "tier", "outcome"],
)

SCENES_CLASSIFIED = Counter(
    "scenemood_scenes_total",
    "Classified scenes by label source",
    ["source"],
)

PIPELINE_SECONDS = Histogram(
    "scenemood_pipeline_seconds",
    "Wall-clock duration of one pipeline run",
    buckets=(0.1, 0.5, 1, 2.5, 5, 10, 30, 60, 120),
)


def record_classification_call(enabled: bool, provider: str, tier: str, outcome: str) -> None:
    if enabled:
        CLASSIFICATION_CALLS.labels(provider=provider, tier=tier, outcome=outcome).inc()


def record_scene(enabled: bool, fallback_used: bool) -> None:
    if enabled:
        SCENES_CLASSIFIED.labels(source="local" if fallback_used else "external").inc()


def observe_pipeline(enabled: bool, seconds: float) -> None:
    if enabled:
        PIPELINE_SECONDS.observe(seconds)
