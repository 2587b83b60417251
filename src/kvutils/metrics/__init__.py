"""
Prometheus metrics for kvcheck runs.

``HarnessMetrics`` counts operations, not-found outcomes and mismatches per
schema variant; ``MetricsPublisher`` serves them on ``/metrics`` while a
multi-run campaign executes.

Usage:
    from kvutils.metrics import HarnessMetrics, MetricsPublisher

    MetricsPublisher(port=9091).start()
    metrics = HarnessMetrics()
    metrics.record_operation("row", "read", notfound=False)
"""

from typing import Callable, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry

T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Return the collector registered as ``metric_name``, creating it if absent.

    ``metric_name`` is the base name without the ``_total`` suffix that
    prometheus_client appends to counters. A second ``HarnessMetrics``
    built against the same registry reuses the first one's collectors.
    """
    existing = registry._names_to_collectors.get(metric_name)
    if existing is not None:
        return existing
    return metric_factory()


from .harness import HarnessMetrics  # noqa: E402
from .publisher import MetricsPublisher  # noqa: E402

__all__ = [
    "HarnessMetrics",
    "MetricsPublisher",
    "get_or_create_metric",
]
