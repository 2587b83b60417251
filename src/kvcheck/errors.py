"""
Exception hierarchy for the harness.

Not-found is never an exception: stores report it through their return
values and the comparator decides whether the two sides agree. Every
exception here is fatal to the run that raised it.
"""


class HarnessError(Exception):
    """Base class for all harness failures."""


class ConfigurationError(HarnessError, ValueError):
    """Raised when a run configuration is invalid."""


class StoreError(HarnessError):
    """
    An engine error returned from a data or administrative call.

    The engine's own error text is kept verbatim in ``message``; the
    operation, row and side are attached so the failing step can be
    located in the operation trace. Callers higher up may fill in the
    row number with ``annotate`` before re-raising.
    """

    def __init__(
        self,
        message: str,
        *,
        side: str | None = None,
        operation: str | None = None,
        row: int | None = None,
    ):
        self.message = message
        self.side = side
        self.operation = operation
        self.row = row
        super().__init__(message)

    def annotate(self, *, operation: str | None = None, row: int | None = None) -> "StoreError":
        if self.operation is None:
            self.operation = operation
        if self.row is None:
            self.row = row
        return self

    def __str__(self) -> str:
        parts = []
        if self.side:
            parts.append(self.side)
        if self.operation:
            parts.append(self.operation)
        if self.row is not None:
            parts.append(f"row {self.row}")
        parts.append(self.message)
        return ": ".join(parts)


class DuplicateKeyError(StoreError):
    """An insert without overwrite hit an existing key."""


class ResourceBusyError(StoreError):
    """The store refused an operation because resources are still in use."""


class UnsupportedOperationError(StoreError):
    """The operation does not exist for this schema variant or configuration."""


class MismatchError(HarnessError):
    """
    The SUT and the oracle disagree.

    ``details`` holds the rendered bytes of both sides, one line each,
    in the order they should be printed.
    """

    def __init__(
        self,
        operation: str,
        reason: str,
        *,
        row: int | None = None,
        details: list[str] | None = None,
    ):
        self.operation = operation
        self.reason = reason
        self.row = row
        self.details = list(details or [])

        header = operation
        if row is not None:
            header += f": row {row}"
        lines = [f"{header}: {reason}"] + self.details
        super().__init__("\n".join(lines))


class NotFoundMismatchError(MismatchError):
    """One side found the row and the other did not."""
