"""
Run orchestration.

A run opens a fresh SUT and oracle, bulk loads them, verifies the SUT,
scans every row, executes the random operations, scans again, walks
both stores in lock step and tears everything down. Runs repeat with
consecutive seeds until the configured count is reached or one fails.
"""

import random
import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from kvutils.logging import ContextLogger
from kvutils.metrics import HarnessMetrics
from kvutils.tracing import add_span_attributes, trace_operation

from .compare import Comparator
from .config import RunConfig
from .context import RunContext
from .driver import OperationDriver
from .errors import HarnessError
from .events import EventHandler, NullEventHandler
from .loader import BulkLoader
from .scan import ScanVerifier, dump_compare
from .stores import open_stores

STATUS_PASS = "PASS"
STATUS_FAIL = "FAIL"


@dataclass
class RunSummary:
    """Outcome and tallies of one run."""

    run: int
    seed: int
    variant: str
    rows_initial: int
    rows_final: int = 0
    ops: int = 0
    operations: Counter = field(default_factory=Counter)
    notfound: Counter = field(default_factory=Counter)
    loaded: int = 0
    scanned: int = 0
    dumped: int = 0
    duration_seconds: float = 0.0
    status: str = STATUS_PASS
    error: str | None = None
    started_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def passed(self) -> bool:
        return self.status == STATUS_PASS

    def to_dict(self) -> dict[str, Any]:
        return {
            "run": self.run,
            "seed": self.seed,
            "variant": self.variant,
            "rows_initial": self.rows_initial,
            "rows_final": self.rows_final,
            "ops": self.ops,
            "operations": dict(self.operations),
            "notfound": dict(self.notfound),
            "loaded": self.loaded,
            "scanned": self.scanned,
            "dumped": self.dumped,
            "duration_seconds": round(self.duration_seconds, 3),
            "status": self.status,
            "error": self.error,
            "started_at": self.started_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunSummary":
        data = dict(data)
        data["operations"] = Counter(data.get("operations") or {})
        data["notfound"] = Counter(data.get("notfound") or {})
        return cls(**data)


def base_seed(config: RunConfig) -> int:
    """The configured seed, or a fresh one from the system source."""
    if config.seed is not None:
        return config.seed
    return random.SystemRandom().randrange(2 ** 32)


class Runner:
    """Executes ``config.runs`` runs and collects their summaries."""

    def __init__(
        self,
        config: RunConfig,
        events: EventHandler | None = None,
        metrics: HarnessMetrics | None = None,
    ):
        self.config = config
        self.events = events or NullEventHandler()
        self.metrics = metrics

    def run_all(self) -> list[RunSummary]:
        """Run until ``config.runs`` complete or one fails."""
        seed = base_seed(self.config)
        summaries = []
        for run in range(1, self.config.runs + 1):
            summary = self.run_once(run, seed + run - 1)
            summaries.append(summary)
            if not summary.passed:
                break
        return summaries

    def run_once(self, run: int, seed: int) -> RunSummary:
        """
        Execute one complete run.

        Harness failures are caught and recorded in the summary; any
        other exception propagates.
        """
        config = self.config
        log = ContextLogger(__name__, run=run, seed=seed, variant=config.variant.value)
        summary = RunSummary(run=run, seed=seed, variant=config.variant.value, rows_initial=config.rows)
        start = time.monotonic()
        context = None

        log.info(f"run {run}: starting")
        try:
            with trace_operation("run", run=run, seed=seed, variant=config.variant.value):
                with open_stores(config) as (sut, oracle):
                    context = RunContext.create(
                        config, sut, oracle, seed, events=self.events, metrics=self.metrics
                    )
                    self._phases(context, summary, log)
        except HarnessError as e:
            summary.status = STATUS_FAIL
            summary.error = str(e)
            log.error(f"run {run}: failed: {e}")
        finally:
            summary.duration_seconds = time.monotonic() - start
            if context is not None:
                summary.rows_final = context.row_count
                summary.operations = Counter(context.operations)
                summary.notfound = Counter(context.notfound)

        if self.metrics is not None:
            self.metrics.record_run(config.variant.value, summary.passed, summary.duration_seconds)
        if summary.passed:
            log.info(f"run {run}: passed in {summary.duration_seconds:.2f}s")
        return summary

    def _phases(self, context: RunContext, summary: RunSummary, log: ContextLogger) -> None:
        comparator = Comparator(context)
        scanner = ScanVerifier(context, comparator)

        with trace_operation("bulk_load", rows=context.config.rows):
            summary.loaded = BulkLoader(context).load()
        log.debug(f"loaded {summary.loaded} rows")

        with trace_operation("verify", phase="loaded"):
            context.sut.verify()

        with trace_operation("read_scan", phase="initial"):
            summary.scanned += scanner.scan()

        with trace_operation("operations", ops=context.config.ops):
            summary.ops = OperationDriver(context, comparator).run()
            add_span_attributes(row_count=context.row_count)

        with trace_operation("read_scan", phase="final"):
            summary.scanned += scanner.scan()

        with trace_operation("dump_compare"):
            summary.dumped = dump_compare(context, comparator)

        with trace_operation("verify", phase="final"):
            context.sut.verify()

        log.debug(f"sut stats: {context.sut.stats()}")
        log.debug(f"oracle stats: {context.oracle.stats()}")
