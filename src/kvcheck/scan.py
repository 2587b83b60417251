"""
Full-range audits: the strided read scan and the ordered dump comparison.
"""

import logging

from .compare import Comparator
from .context import RunContext
from .errors import StoreError
from .stores import CursorKind

logger = logging.getLogger(__name__)

MAX_STRIDE = 17
PROGRESS_INTERVAL = 1000


class ScanVerifier:
    """
    Reads every row in [1, row count] once, in a shuffled strided order.

    A stride ``s`` is drawn from [1, 17]; the residue classes modulo
    ``s`` are visited in random order, each in increasing row order.
    """

    def __init__(self, context: RunContext, comparator: Comparator | None = None):
        self.context = context
        self.comparator = comparator or Comparator(context)

    def visit_order(self, rows: int) -> list[int]:
        rng = self.context.rng
        stride = rng.randint(1, MAX_STRIDE)
        residues = list(range(1, stride + 1))
        rng.shuffle(residues)
        logger.debug(f"read scan of {rows} rows with stride {stride}")
        return [row for start in residues for row in range(start, rows + 1, stride)]

    def scan(self) -> int:
        """Verify every row; return the number of rows read."""
        ctx = self.context
        count = 0
        reported = 0
        for row in self.visit_order(ctx.row_count):
            self.comparator.verify_read(row)
            count += 1
            if count - reported > PROGRESS_INTERVAL:
                ctx.progress("read row scan", count)
                reported = count
        return count


def dump_compare(context: RunContext, comparator: Comparator | None = None) -> int:
    """
    Walk both stores from the first key to the last in lock step.

    Every key and value must match and both traversals must end
    together. Returns the number of entries compared.
    """
    comparator = comparator or Comparator(context)
    context.sut.reset_cursor(CursorKind.OVERWRITE)
    context.oracle.reset_cursor(CursorKind.OVERWRITE)

    count = 0
    while True:
        try:
            sut_item = context.sut.cursor_next(CursorKind.OVERWRITE)
            oracle_item = context.oracle.cursor_next(CursorKind.OVERWRITE)
        except StoreError as e:
            raise e.annotate(operation="dump")

        if sut_item is None and oracle_item is None:
            break
        comparator.compare_step("dump", sut_item, oracle_item)
        count += 1
        if count % PROGRESS_INTERVAL == 0:
            context.progress("dump", count)

    logger.debug(f"dump compared {count} entries")
    return count
