"""
Metrics for differential test runs.

Tracks operations issued against the stores, not-found outcomes,
mismatches, phase progress and run durations.
"""

import logging
import time

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
)

from . import get_or_create_metric

logger = logging.getLogger(__name__)


class HarnessMetrics:
    """
    Metrics for kvcheck runs

    All metrics are registered against ``registry``; constructing a second
    instance against the same registry reuses the existing collectors.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or REGISTRY

        self.operations_total = get_or_create_metric(
            lambda: Counter(
                "kvcheck_operations_total",
                "Total operations applied to both stores",
                ["variant", "operation"],
                registry=self.registry,
            ),
            "kvcheck_operations",
            self.registry,
        )

        self.notfound_total = get_or_create_metric(
            lambda: Counter(
                "kvcheck_notfound_total",
                "Operations where both stores agreed the row was absent",
                ["variant", "operation"],
                registry=self.registry,
            ),
            "kvcheck_notfound",
            self.registry,
        )

        self.mismatches_total = get_or_create_metric(
            lambda: Counter(
                "kvcheck_mismatches_total",
                "Divergences detected between SUT and oracle",
                ["variant", "kind"],
                registry=self.registry,
            ),
            "kvcheck_mismatches",
            self.registry,
        )

        self.progress = get_or_create_metric(
            lambda: Gauge(
                "kvcheck_progress",
                "Last progress counter reported by a run phase",
                ["operation"],
                registry=self.registry,
            ),
            "kvcheck_progress",
            self.registry,
        )

        self.runs_total = get_or_create_metric(
            lambda: Counter(
                "kvcheck_runs_total",
                "Completed runs by outcome",
                ["variant", "status"],
                registry=self.registry,
            ),
            "kvcheck_runs",
            self.registry,
        )

        self.run_duration_seconds = get_or_create_metric(
            lambda: Histogram(
                "kvcheck_run_duration_seconds",
                "Duration of a single run in seconds",
                ["variant"],
                buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 300, 900, 3600),
                registry=self.registry,
            ),
            "kvcheck_run_duration_seconds",
            self.registry,
        )

        self.last_run_timestamp = get_or_create_metric(
            lambda: Gauge(
                "kvcheck_last_run_timestamp",
                "Timestamp of the last finished run",
                ["variant"],
                registry=self.registry,
            ),
            "kvcheck_last_run_timestamp",
            self.registry,
        )

    def record_operation(self, variant: str, operation: str, notfound: bool = False) -> None:
        self.operations_total.labels(variant=variant, operation=operation).inc()
        if notfound:
            self.notfound_total.labels(variant=variant, operation=operation).inc()

    def record_mismatch(self, variant: str, kind: str) -> None:
        self.mismatches_total.labels(variant=variant, kind=kind).inc()
        logger.warning(f"Mismatch recorded: variant={variant}, kind={kind}")

    def record_progress(self, operation: str, counter: int) -> None:
        self.progress.labels(operation=operation).set(counter)

    def record_run(self, variant: str, success: bool, duration: float) -> None:
        """
        Record a finished run

        Args:
            variant: Schema variant name
            success: Whether the run completed without divergence
            duration: Duration in seconds
        """
        status = "success" if success else "failed"
        self.runs_total.labels(variant=variant, status=status).inc()
        self.run_duration_seconds.labels(variant=variant).observe(duration)
        self.last_run_timestamp.labels(variant=variant).set(time.time())

        logger.info(
            f"Recorded run: variant={variant}, status={status}, duration={duration:.2f}s"
        )
