"""
Initial population of both stores.
"""

import logging

from .config import Collation
from .context import RunContext
from .errors import MismatchError, StoreError

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 100


class BulkLoader:
    """
    Loads rows 1..N into the SUT through its ordered bulk path and
    mirrors each row into the oracle with an upsert.

    A reverse-collated row store cannot take keys in ascending byte
    order, so the SUT is loaded with plain upserts instead.
    """

    def __init__(self, context: RunContext):
        self.context = context

    @property
    def uses_bulk_path(self) -> bool:
        config = self.context.config
        return config.variant.is_column or config.collation is Collation.DEFAULT

    def load(self, rows: int | None = None) -> int:
        """Load rows ``loaded_count + 1`` through ``rows``; return the count loaded."""
        ctx = self.context
        rows = ctx.config.rows if rows is None else rows
        start = ctx.loaded_count + 1

        with ctx.sut.bulk_session():
            for row in range(start, rows + 1):
                if row % PROGRESS_INTERVAL == 0:
                    ctx.progress("bulk load", row)
                try:
                    self._load_row(row)
                except StoreError as e:
                    raise e.annotate(operation="bulk", row=row)

        loaded = max(rows - start + 1, 0)
        logger.debug(f"bulk loaded {loaded} rows")
        return loaded

    def _load_row(self, row: int) -> None:
        ctx = self.context
        key = ctx.generator.generate_key(row)
        value = ctx.generator.generate_value(row)

        if self.uses_bulk_path:
            assigned = ctx.sut.bulk_append(None if ctx.config.variant.is_column else key, value)
            if ctx.config.variant.is_column and assigned != row:
                raise MismatchError("bulk", f"bulk append assigned row {assigned}", row=row)
        else:
            ctx.sut.put(key, value)
        ctx.oracle.put(key, value)

        ctx.loaded_count = row
        ctx.note_written(row)
        ctx.log_op("bulk", key, value)
