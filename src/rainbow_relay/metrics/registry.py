"""
Metric registry using prometheus_client.

Provides pre-defined metrics for the relay.
Exposes metrics in Prometheus text format.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    start_http_server,
)

# Create a dedicated registry for relay metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Verifier Head
# -----------------------------------------------------------------------------

head_height = Gauge(
    "relay_head_height",
    "Height of the verifier contract's current head",
    registry=REGISTRY,
)

validity_wait_time = Histogram(
    "relay_validity_wait_seconds",
    "Time spent waiting for the head's validity window to pass",
    buckets=(1, 5, 15, 30, 60, 120, 300, 600, 1800, 3600),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Submissions
# -----------------------------------------------------------------------------

blocks_submitted = Counter(
    "relay_blocks_submitted_total",
    "Light client blocks accepted by the verifier contract",
    registry=REGISTRY,
)

submission_failures = Counter(
    "relay_submission_failures_total",
    "Relay steps that failed and were retried",
    ["kind"],
    registry=REGISTRY,
)

deposits = Counter(
    "relay_deposits_total",
    "Stake deposits made by the relay account",
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)


def serve_metrics(port: int, addr: str = "0.0.0.0") -> None:
    """Expose the registry over HTTP on `addr:port` from a background thread."""
    start_http_server(port, addr=addr, registry=REGISTRY)
