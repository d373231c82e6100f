"""Prometheus metrics for monitoring approval rates, score distribution, and narrative provider performance"""

from prometheus_client import Counter, Histogram

# Scoring metrics
scoring_counter = Counter(
    "xai_credit_scoring_total",
    "Total applicants scored",
    ["model_type", "outcome"],  # standard | deepLearning, approved | denied
)

score_histogram = Histogram(
    "xai_credit_score",
    "Distribution of final credit scores",
    ["model_type"],
    buckets=[300, 400, 500, 580, 620, 670, 740, 800, 850],
)

# Narrative provider metrics
narrative_latency_histogram = Histogram(
    "narrative_latency_seconds",
    "Narrative provider response time",
    ["operation"],  # explain | chat | extract
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

narrative_failure_counter = Counter(
    "narrative_failures_total",
    "Failed narrative provider calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(model_type: str, approved: bool, score: int) -> None:
    """Record scoring metrics for monitoring approval rates per model variant"""
    outcome = "approved" if approved else "denied"
    scoring_counter.labels(model_type=model_type, outcome=outcome).inc()
    score_histogram.labels(model_type=model_type).observe(score)
