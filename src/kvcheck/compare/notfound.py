"""
Not-found reconciliation between the SUT and the oracle.

Fixed-length column stores have no notion of a missing row inside their
range: a slot past the last row ever written simply reads as zero on
the oracle while the SUT reports it absent. That one case is accepted;
every other asymmetry is fatal.
"""

from dataclasses import dataclass
from enum import Enum

from .. import diagnostics
from ..config import SchemaVariant


class Resolution(str, Enum):
    CONTINUE = "continue"      # both sides hold the row; compare values
    ABSENT_ROW = "absent_row"  # neither side holds it; stop dependent probes
    FATAL = "fatal"


@dataclass(frozen=True)
class NotFoundDecision:
    resolution: Resolution
    sut_value: bytes | None = None
    reason: str = ""

    @property
    def is_fatal(self) -> bool:
        return self.resolution is Resolution.FATAL


def reconcile_notfound(
    variant: SchemaVariant,
    sut_found: bool,
    oracle_found: bool,
    row: int | None,
    max_written_row: int,
) -> NotFoundDecision:
    """
    Decide how a pair of lookup outcomes relate.

    Args:
        variant: Schema variant of the run
        sut_found: Whether the SUT returned a value
        oracle_found: Whether the oracle returned a value
        row: Row number looked up, or None for cursor moves
        max_written_row: Highest row number ever explicitly written

    Returns:
        NotFoundDecision; ``sut_value`` is set to the zero byte when the
        SUT result is to be treated as a zero-valued fixed-length row
    """
    if sut_found and oracle_found:
        return NotFoundDecision(Resolution.CONTINUE)
    if not sut_found and not oracle_found:
        return NotFoundDecision(Resolution.ABSENT_ROW)
    if sut_found:
        return NotFoundDecision(Resolution.FATAL, reason="row present in SUT, absent in oracle")

    if variant is SchemaVariant.FIX and row is not None and row > max_written_row:
        return NotFoundDecision(
            Resolution.CONTINUE,
            sut_value=b"\x00",
            reason=f"fixed-length row {row} beyond last written row {max_written_row}",
        )
    return NotFoundDecision(Resolution.FATAL, reason="row present in oracle, absent in SUT")


def describe(variant: SchemaVariant, sut: bytes | None, oracle: bytes | None) -> list[str]:
    """Dump lines for both sides of a disagreement, oracle first."""
    fixed = variant is SchemaVariant.FIX
    return [
        diagnostics.stream_item("oracle", oracle, fixed),
        diagnostics.stream_item("sut", sut, fixed),
    ]
