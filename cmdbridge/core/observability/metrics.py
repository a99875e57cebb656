"""
Simple in-memory metrics for OpenClaw CLI invocations: calls and failures per command.
"""
import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger("cmdbridge.gateway.metrics")


class GatewayMetrics:
    """In-memory counters for scheduler CLI invocations."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls_total: Dict[str, int] = {}
        self._errors_total: Dict[str, int] = {}
        self._last_error: Optional[str] = None

    def record_invocation(self, command: str, success: bool, error: Optional[str] = None) -> None:
        with self._lock:
            self._calls_total[command] = self._calls_total.get(command, 0) + 1
            if not success:
                self._errors_total[command] = self._errors_total.get(command, 0) + 1
                self._last_error = error

    def get_stats(self) -> Dict[str, object]:
        with self._lock:
            return {
                "calls": dict(self._calls_total),
                "errors": dict(self._errors_total),
                "lastError": self._last_error,
            }

    def get_error_rate(self) -> Optional[float]:
        with self._lock:
            total = sum(self._calls_total.values())
            if total == 0:
                return None
            return sum(self._errors_total.values()) / total

    def reset(self) -> None:
        with self._lock:
            self._calls_total.clear()
            self._errors_total.clear()
            self._last_error = None


_metrics = GatewayMetrics()


def get_metrics() -> GatewayMetrics:
    return _metrics


def record_invocation(command: str, success: bool, error: Optional[str] = None) -> None:
    _metrics.record_invocation(command, success, error)
