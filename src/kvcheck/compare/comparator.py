"""
Side-by-side comparison of SUT and oracle results.
"""

import logging

from .. import diagnostics
from ..context import RunContext
from ..errors import MismatchError, NotFoundMismatchError, StoreError
from ..stores import CursorKind, Item
from .notfound import NotFoundDecision, Resolution, describe, reconcile_notfound

logger = logging.getLogger(__name__)


class Comparator:
    """
    Compares the two sides of every observable result.

    Any disagreement raises MismatchError carrying both sides' bytes;
    the run context's metrics count it first.
    """

    def __init__(self, context: RunContext):
        self.context = context

    def _mismatch(self, kind: str, error: MismatchError) -> MismatchError:
        if self.context.metrics is not None:
            self.context.metrics.record_mismatch(self.context.config.variant.value, kind)
        logger.error(str(error))
        return error

    def _decide(
        self,
        operation: str,
        row: int | None,
        sut_found: bool,
        oracle_found: bool,
        details: list[str],
    ) -> NotFoundDecision:
        decision = reconcile_notfound(
            self.context.config.variant, sut_found, oracle_found, row, self.context.max_written_row
        )
        if decision.is_fatal:
            raise self._mismatch(
                "notfound",
                NotFoundMismatchError(operation, decision.reason, row=row, details=details),
            )
        return decision

    def check_found(self, operation: str, row: int | None, sut_found: bool, oracle_found: bool) -> Resolution:
        """Reconcile operations that only report found/not-found, such as delete."""
        details = [f"\toracle {'found' if oracle_found else 'not found'}",
                   f"\tsut {'found' if sut_found else 'not found'}"]
        return self._decide(operation, row, sut_found, oracle_found, details).resolution

    def reconcile(
        self,
        operation: str,
        row: int | None,
        sut_value: bytes | None,
        oracle_value: bytes | None,
    ) -> Resolution:
        """
        Reconcile not-found status, then compare values if both exist.

        Returns CONTINUE or ABSENT_ROW; a fatal disagreement raises
        NotFoundMismatchError.
        """
        decision = self._decide(
            operation,
            row,
            sut_value is not None,
            oracle_value is not None,
            describe(self.context.config.variant, sut_value, oracle_value),
        )

        if decision.sut_value is not None:
            logger.debug(f"{operation}: {decision.reason}")
            sut_value = decision.sut_value

        if decision.resolution is Resolution.CONTINUE:
            self.compare_values(operation, row, sut_value, oracle_value)
        return decision.resolution

    def compare_values(
        self,
        operation: str,
        row: int | None,
        sut_value: bytes,
        oracle_value: bytes,
    ) -> None:
        if sut_value != oracle_value:
            raise self._mismatch(
                "value",
                MismatchError(
                    operation,
                    "value mismatch",
                    row=row,
                    details=describe(self.context.config.variant, sut_value, oracle_value),
                ),
            )

    def verify_read(self, row: int, cursor: CursorKind = CursorKind.OVERWRITE) -> Resolution:
        """Read ``row`` from both stores and reconcile the results."""
        ctx = self.context
        key = ctx.generator.generate_key(row)

        try:
            sut_value = ctx.sut.get(key, cursor)
            oracle_value = ctx.oracle.get(key, cursor)
        except StoreError as e:
            raise e.annotate(operation="read", row=row)

        ctx.record("read", notfound=sut_value is None)
        ctx.log_op("read", key, sut_value)
        return self.reconcile("read", row, sut_value, oracle_value)

    def compare_step(self, operation: str, sut_item: Item | None, oracle_item: Item | None) -> Resolution:
        """
        Compare one cursor move on both sides.

        Keys must match exactly before values are compared; a move that
        ran off the end on both sides is ABSENT_ROW.
        """
        sut_value = None if sut_item is None else sut_item[1]
        oracle_value = None if oracle_item is None else oracle_item[1]

        if sut_item is not None and oracle_item is not None and sut_item[0] != oracle_item[0]:
            raise self._mismatch(
                "key",
                MismatchError(
                    operation,
                    "key mismatch",
                    details=[
                        f"\toracle {diagnostics.format_target(oracle_item[0])}",
                        f"\tsut {diagnostics.format_target(sut_item[0])}",
                    ],
                ),
            )

        return self.reconcile(operation, None, sut_value, oracle_value)
