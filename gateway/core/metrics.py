"""
Prometheus Metrics
==================
Counters and histograms exported on /metrics.
"""

from prometheus_client import Counter, Histogram

provider_attempts_total = Counter(
    "gateway_provider_attempts_total",
    "Provider calls attempted by the fallback executor",
    ["provider", "outcome"],
)

provider_latency_seconds = Histogram(
    "gateway_provider_latency_seconds",
    "Provider call latency in seconds",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
)

blocked_requests_total = Counter(
    "gateway_blocked_requests_total",
    "Requests refused by admission control",
    ["kind"],
)

usage_cost_usd_total = Counter(
    "gateway_usage_cost_usd_total",
    "Cost in USD of successful calls",
    ["provider", "model"],
)

usage_events_dropped_total = Counter(
    "gateway_usage_events_dropped_total",
    "Usage events that could not be persisted",
    ["reason"],
)
