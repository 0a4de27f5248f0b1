"""System-level metrics via Prometheus client."""

import logging

from prometheus_client import Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Counters
AGENT_CALLS = Counter(
    "agent_calls_total",
    "Total number of pipeline stage invocations",
    ["agent"],
)

AGENT_ERRORS = Counter(
    "agent_errors_total",
    "Stage failures cured by a local fallback (network, timeout, decode)",
    ["agent"],
)

TOKENS_USED = Counter(
    "tokens_used_total",
    "Total tokens consumed across all LLM calls",
)

AGENT_TOKEN_USAGE = Counter(
    "agent_token_usage",
    "Per-stage token tracking",
    ["agent"],
)

REPAIR_ATTEMPTS = Counter(
    "repair_attempts_total",
    "Repair passes, labelled by candidate source (remote or local)",
    ["outcome"],
)

FALLBACKS = Counter(
    "fallbacks_total",
    "Generations that left the direct path",
    ["path"],
)

GENERATIONS = Counter(
    "generations_total",
    "Finished generations by strategy and outcome",
    ["strategy", "outcome"],
)

# Gauges
ACTIVE_GENERATIONS = Gauge(
    "active_generations",
    "Generations currently in flight",
)

# Histograms
AGENT_LATENCY = Histogram(
    "agent_latency_seconds",
    "Time spent in each pipeline stage",
    ["agent"],
    buckets=[0.5, 1, 2, 5, 10, 30, 60, 120, 300],
)

GENERATION_DURATION = Histogram(
    "generation_duration_seconds",
    "End-to-end generation latency",
    buckets=[5, 10, 30, 60, 120, 300, 600],
)


def start_metrics_server(port: int = 9090) -> None:
    """Start Prometheus metrics endpoint on /metrics."""
    try:
        start_http_server(port)
        logger.info(f"[metrics] Prometheus metrics available at http://localhost:{port}/metrics")
    except OSError as e:
        logger.warning(f"[metrics] Could not start metrics server: {e}")
