"""
Prometheus-compatible metrics for observability.

Tracks booking lifecycle activity:
- Bookings created (by product_type)
- Status transitions applied (by from_status, to_status)
- Return requests opened
- Booking/return dual-write consistency failures

Usage:
    from tailorbook.lib.metrics import get_metrics_collector

    metrics = get_metrics_collector()
    metrics.increment_transitions(from_status="pending", to_status="confirmed")

    # Export for Prometheus
    prometheus_output = metrics.export_prometheus()
"""

from typing import Dict, Tuple
from threading import Lock


CounterKey = Tuple[str, Tuple[Tuple[str, str], ...]]


class MetricsCollector:
    """
    Prometheus-style metrics collector for the booking backend.

    Counters:
    - bookings_created_total: New bookings (labels: product_type)
    - booking_transitions_total: Applied status changes (labels: from_status, to_status)
    - return_requests_total: Return requests opened by customers
    - consistency_failures_total: Booking/return dual writes that failed (labels: operation)

    Thread-safe for concurrent increments.
    """

    HELP = {
        "bookings_created_total": "Total bookings created",
        "booking_transitions_total": "Total booking status transitions applied",
        "return_requests_total": "Total return requests opened",
        "consistency_failures_total": "Total booking/return dual-write failures",
    }

    def __init__(self):
        self._lock = Lock()
        self._counters: Dict[CounterKey, int] = {}

    def _get_counter_key(self, metric_name: str, labels: Dict[str, str]) -> CounterKey:
        """Generate unique key for counter with sorted labels."""
        return (metric_name, tuple(sorted(labels.items())))

    def _increment(self, metric_name: str, labels: Dict[str, str], amount: int = 1):
        key = self._get_counter_key(metric_name, labels)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + amount

    def get_counter_value(self, metric_name: str, labels: Dict[str, str] | None = None) -> int:
        """Get current value of counter (for testing and debugging)."""
        labels = labels or {}
        key = self._get_counter_key(metric_name, labels)
        with self._lock:
            return self._counters.get(key, 0)

    def increment_bookings_created(self, product_type: str, amount: int = 1):
        self._increment("bookings_created_total", {"product_type": product_type}, amount)

    def increment_transitions(self, from_status: str, to_status: str, amount: int = 1):
        labels = {"from_status": from_status, "to_status": to_status}
        self._increment("booking_transitions_total", labels, amount)

    def increment_return_requests(self, amount: int = 1):
        self._increment("return_requests_total", {}, amount)

    def increment_consistency_failures(self, operation: str, amount: int = 1):
        self._increment("consistency_failures_total", {"operation": operation}, amount)

    def export_prometheus(self) -> str:
        """
        Export all counters in Prometheus text exposition format.

        Returns:
            Prometheus-formatted metrics string
        """
        with self._lock:
            snapshot = dict(self._counters)

        by_metric: Dict[str, list] = {}
        for (metric_name, labels), value in sorted(snapshot.items()):
            by_metric.setdefault(metric_name, []).append((labels, value))

        lines = []
        for metric_name, samples in by_metric.items():
            lines.append(f"# HELP {metric_name} {self.HELP.get(metric_name, metric_name)}")
            lines.append(f"# TYPE {metric_name} counter")
            for labels, value in samples:
                if labels:
                    label_str = ",".join(f'{k}="{v}"' for k, v in labels)
                    lines.append(f"{metric_name}{{{label_str}}} {value}")
                else:
                    lines.append(f"{metric_name} {value}")

        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    def reset_all(self):
        """Reset all counters (for testing)."""
        with self._lock:
            self._counters.clear()


# Global singleton instance
_metrics_collector: MetricsCollector | None = None
_metrics_lock = Lock()


def get_metrics_collector() -> MetricsCollector:
    """
    Get global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _metrics_collector
    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()
    return _metrics_collector


def reset_metrics():
    """Reset global metrics collector (for testing)."""
    with _metrics_lock:
        if _metrics_collector is not None:
            _metrics_collector.reset_all()
