"""
Metrics module for observability.

Provides counters, gauges, and histograms for tracking relay behavior.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    blocks_submitted,
    deposits,
    generate_metrics,
    head_height,
    serve_metrics,
    submission_failures,
    validity_wait_time,
)

__all__ = [
    "REGISTRY",
    "blocks_submitted",
    "deposits",
    "generate_metrics",
    "head_height",
    "serve_metrics",
    "submission_failures",
    "validity_wait_time",
]
