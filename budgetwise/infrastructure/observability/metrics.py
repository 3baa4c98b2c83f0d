"""Prometheus metrics for decision outcomes, advisor calls and HTTP latency"""

from prometheus_client import Counter, Histogram

# Decision metrics
decision_counter = Counter(
    "budgetwise_decision_total",
    "Total life decisions analyzed",
    ["category", "tier"],  # rent | car | education | moving; excellent .. high-risk
)

risk_level_histogram = Histogram(
    "budgetwise_risk_level",
    "Risk level of analyzed decisions",
    buckets=[1, 2, 3, 4],
)

# AI advisor metrics
advisor_latency_histogram = Histogram(
    "advisor_latency_seconds",
    "AI advisor response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

advisor_failure_counter = Counter(
    "advisor_failures_total",
    "Failed AI advisor calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(category: str, tier: str, risk_level: int) -> None:
    """Record decision metrics for monitoring the affordability mix per category"""
    decision_counter.labels(category=category, tier=tier).inc()
    risk_level_histogram.observe(risk_level)
