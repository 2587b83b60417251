"""
Randomized operation driver.

Each step picks a row and an operation, applies the operation to the
SUT and then the oracle, reconciles the outcomes, probes the
neighbourhood with a few cursor moves and finally re-reads the row.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .compare import Comparator, Resolution
from .context import RunContext
from .errors import MismatchError, StoreError
from .stores import CursorKind

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10
MAX_PROBES = 4


class Operation(str, Enum):
    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    NEXT = "next"
    PREV = "prev"


@dataclass
class OperationRecord:
    """One driver step, kept for the trace line and for tests."""

    kind: Operation
    row: int
    key: bytes | int | None = None
    value: bytes | None = None
    notfound: bool = False
    cursor: CursorKind = CursorKind.OVERWRITE


def choose_operation(roll: int, delete_pct: int, insert_pct: int, write_pct: int) -> Operation:
    """Map a roll in [0, 100) onto the cumulative operation thresholds."""
    if roll < delete_pct:
        return Operation.DELETE
    if roll < delete_pct + insert_pct:
        return Operation.INSERT
    if roll < delete_pct + insert_pct + write_pct:
        return Operation.UPDATE
    return Operation.READ


class OperationDriver:
    """Runs the configured number of random operations against both stores."""

    def __init__(self, context: RunContext, comparator: Comparator | None = None):
        self.context = context
        self.comparator = comparator or Comparator(context)

    def run(self) -> int:
        """Execute ``config.ops`` steps; return the number executed."""
        ops = self.context.config.ops
        for count in range(ops):
            if count % PROGRESS_INTERVAL == 0:
                self.context.progress("read/write ops", count)
            self.step()
        logger.debug(f"completed {ops} operations, row count {self.context.row_count}")
        return ops

    def step(self) -> OperationRecord:
        ctx = self.context
        config = ctx.config
        row = ctx.rng.randint(1, ctx.row_count)
        op = choose_operation(ctx.rng.randrange(100), config.delete_pct, config.insert_pct, config.write_pct)

        if op is Operation.READ:
            resolution = self.comparator.verify_read(row)
            return OperationRecord(op, row, notfound=resolution is Resolution.ABSENT_ROW)

        try:
            if op is Operation.DELETE:
                record = self._delete(row)
            elif op is Operation.INSERT:
                record = self._insert(row)
            else:
                record = self._update(row)
        except StoreError as e:
            raise e.annotate(operation=op.value, row=row)

        if not record.notfound:
            self.probe(record.cursor)
        self.comparator.verify_read(record.row)
        return record

    def _delete(self, row: int) -> OperationRecord:
        ctx = self.context
        key = ctx.generator.generate_key(row)

        sut_found = ctx.sut.delete(key)
        oracle_found = ctx.oracle.delete(key)
        ctx.record(Operation.DELETE.value, notfound=not sut_found)
        ctx.log_op("remove", key)

        resolution = self.comparator.check_found(Operation.DELETE.value, row, sut_found, oracle_found)
        return OperationRecord(
            Operation.DELETE, row, key, notfound=resolution is Resolution.ABSENT_ROW
        )

    def _insert(self, row: int) -> OperationRecord:
        ctx = self.context

        if not ctx.config.variant.is_column:
            key = ctx.generator.generate_key(row, is_append=True)
            value = ctx.generator.generate_value(row)
            ctx.sut.put(key, value)
            ctx.oracle.put(key, value)
            ctx.note_written(row)
            ctx.record(Operation.INSERT.value)
            ctx.log_op("insert", key, value)
            return OperationRecord(Operation.INSERT, row, key, value)

        value = ctx.generator.generate_value(ctx.row_count + 1)
        new_row = ctx.sut.append(value)
        if new_row <= ctx.row_count:
            raise MismatchError(
                Operation.INSERT.value,
                f"appended row {new_row} does not extend row count {ctx.row_count}",
                row=new_row,
            )
        ctx.oracle.put(new_row, value, overwrite=False, cursor=CursorKind.INSERT)

        ctx.row_count = new_row
        ctx.note_written(new_row)
        ctx.record(Operation.INSERT.value)
        ctx.log_op("insert", new_row, value)
        return OperationRecord(Operation.INSERT, new_row, new_row, value, cursor=CursorKind.INSERT)

    def _update(self, row: int) -> OperationRecord:
        ctx = self.context
        key = ctx.generator.generate_key(row)
        value = ctx.generator.generate_value(row)

        ctx.sut.put(key, value)
        ctx.oracle.put(key, value)
        ctx.note_written(row)
        ctx.record(Operation.UPDATE.value)
        ctx.log_op("put", key, value)
        return OperationRecord(Operation.UPDATE, row, key, value)

    def probe(self, cursor: CursorKind) -> int:
        """
        Move ``cursor`` 1 to 4 times in random directions on both stores.

        Stops early when both sides run off the end. Returns the number
        of moves made.
        """
        ctx = self.context
        moves = 0
        for _ in range(ctx.rng.randint(1, MAX_PROBES)):
            forward = ctx.rng.randrange(2) == 0
            op = Operation.NEXT if forward else Operation.PREV
            try:
                if forward:
                    sut_item = ctx.sut.cursor_next(cursor)
                    oracle_item = ctx.oracle.cursor_next(cursor)
                else:
                    sut_item = ctx.sut.cursor_prev(cursor)
                    oracle_item = ctx.oracle.cursor_prev(cursor)
            except StoreError as e:
                raise e.annotate(operation=op.value)

            moves += 1
            ctx.record(op.value, notfound=sut_item is None)
            if sut_item is not None:
                ctx.log_op(op.value, sut_item[0], sut_item[1])

            if self.comparator.compare_step(op.value, sut_item, oracle_item) is Resolution.ABSENT_ROW:
                break
        return moves
