"""Observability: counters for OpenClaw CLI invocations."""
from cmdbridge.core.observability.metrics import (
    GatewayMetrics,
    get_metrics,
    record_invocation,
)

__all__ = [
    "GatewayMetrics",
    "get_metrics",
    "record_invocation",
]
