"""
Per-run state shared by the driver, loader, scanner and comparator.
"""

import random
from collections import Counter
from dataclasses import dataclass, field

from kvutils.metrics import HarnessMetrics

from . import diagnostics
from .config import RunConfig, SchemaVariant
from .events import EventHandler, NullEventHandler
from .generate import KeyValueGenerator
from .stores import StorageAdapter


@dataclass
class RunContext:
    """
    Everything one run needs, passed explicitly instead of held in globals.

    ``row_count`` grows when column-store inserts append past it;
    ``max_written_row`` is the highest row ever explicitly written and
    bounds the fixed-length not-found exception.
    """

    config: RunConfig
    generator: KeyValueGenerator
    sut: StorageAdapter
    oracle: StorageAdapter
    rng: random.Random
    events: EventHandler = field(default_factory=NullEventHandler)
    metrics: HarnessMetrics | None = None
    row_count: int = 0
    loaded_count: int = 0
    max_written_row: int = 0
    operations: Counter = field(default_factory=Counter)
    notfound: Counter = field(default_factory=Counter)

    @classmethod
    def create(
        cls,
        config: RunConfig,
        sut: StorageAdapter,
        oracle: StorageAdapter,
        seed: int,
        events: EventHandler | None = None,
        metrics: HarnessMetrics | None = None,
    ) -> "RunContext":
        return cls(
            config=config,
            generator=KeyValueGenerator.from_config(config),
            sut=sut,
            oracle=oracle,
            rng=random.Random(seed),
            events=events or NullEventHandler(),
            metrics=metrics,
            row_count=config.rows,
        )

    @property
    def fixed(self) -> bool:
        return self.config.variant is SchemaVariant.FIX

    def note_written(self, row: int) -> None:
        if row > self.max_written_row:
            self.max_written_row = row

    def record(self, operation: str, notfound: bool = False) -> None:
        self.operations[operation] += 1
        if notfound:
            self.notfound[operation] += 1
        if self.metrics is not None:
            self.metrics.record_operation(self.config.variant.value, operation, notfound)

    def log_op(self, verb: str, key: bytes | int, value: bytes | None = None) -> None:
        """Emit one operation trace line when operation logging is on."""
        if self.config.log_ops:
            self.events.on_message(diagnostics.format_operation(verb, key, value, self.fixed))

    def progress(self, operation: str, counter: int) -> None:
        self.events.on_progress(operation, counter)
