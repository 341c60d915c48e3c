"""Prometheus collectors for plan generation (exposed on /metrics)."""

from prometheus_client import Counter, Histogram

GENERATIONS = Counter(
    "workout_generations_total",
    "Plan generation requests by operation and outcome",
    ["operation", "outcome"],
)

MODEL_LATENCY = Histogram(
    "workout_model_latency_seconds",
    "Wall time of completion calls to the model endpoint",
    ["json_mode"],
    buckets=(0.5, 1, 2, 5, 10, 20, 30, 60, 90, 120),
)
