"""
StorageAdapter abstract base class shared by the SUT and oracle stores.

Cursor semantics every implementation must follow, so that traversal on
the two sides can be compared step by step:

- Point operations (get/put/delete) position the cursor they are issued
  on at the key they touched. A get or delete that finds nothing leaves
  that cursor unpositioned.
- append positions the insert cursor on the new row.
- next/prev from a positioned cursor move to the neighbouring key in
  collation order; from an unpositioned cursor they return the first or
  last key. Running off either end returns None and unpositions the
  cursor.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import nullcontext
from enum import Enum
from typing import Any

from ..config import Collation, SchemaVariant
from ..errors import StoreError, UnsupportedOperationError

logger = logging.getLogger(__name__)

Key = bytes | int
Item = tuple[Key, bytes]


class CursorKind(str, Enum):
    """The two standing cursors every adapter keeps open."""

    OVERWRITE = "overwrite"  # general writes against possibly existing rows
    INSERT = "insert"        # column-store appends


class StoreCursor:
    """A standing cursor: a kind and an optional position."""

    def __init__(self, kind: CursorKind):
        self.kind = kind
        self.position: Key | None = None
        self.closed = False

    def reset(self) -> None:
        self.position = None

    def close(self) -> None:
        self.closed = True
        self.position = None


class StorageAdapter(ABC):
    """
    Key-value store driven by the harness.

    Keys are bytes for the row variant and row numbers for the column
    variants. Not-found is reported through return values: ``None`` from
    get and the cursor moves, ``False`` from delete.
    """

    name = "abstract"

    def __init__(
        self,
        variant: SchemaVariant,
        collation: Collation = Collation.DEFAULT,
        bitcnt: int = 8,
        side: str = "store",
    ):
        if collation is not Collation.DEFAULT and variant is not SchemaVariant.ROW:
            raise UnsupportedOperationError(
                "custom collation requires the row variant", side=side, operation="open"
            )

        self.variant = variant
        self.collation = collation
        self.bitcnt = bitcnt
        self.side = side
        self.cursors: dict[CursorKind, StoreCursor] = {}
        self.is_open = False

    # ---- lifecycle -------------------------------------------------------

    def open(self) -> "StorageAdapter":
        """Create the store and its two standing cursors."""
        self._open()
        self.cursors = {kind: self._open_cursor(kind) for kind in CursorKind}
        self.is_open = True
        logger.debug(f"{self.side}: opened {self.name} store ({self.variant.value})")
        return self

    def close_cursors(self) -> None:
        for cursor in self.cursors.values():
            if not cursor.closed:
                self._close_cursor(cursor)
                cursor.close()

    def close(self) -> None:
        """Release the cursors, then the store. Safe to call twice."""
        if not self.is_open:
            return
        try:
            self.close_cursors()
        finally:
            self.is_open = False
            self._close()
        logger.debug(f"{self.side}: closed {self.name} store")

    def __enter__(self) -> "StorageAdapter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def cursor(self, kind: CursorKind = CursorKind.OVERWRITE) -> StoreCursor:
        cursor = self.cursors.get(kind)
        if cursor is None or cursor.closed:
            raise StoreError(f"{kind.value} cursor is not open", side=self.side)
        return cursor

    def reset_cursor(self, kind: CursorKind = CursorKind.OVERWRITE) -> None:
        self.cursor(kind).reset()

    def sync(self) -> None:
        """Flush the store to stable storage; may raise ResourceBusyError."""

    def verify(self) -> None:
        """Check the store's internal consistency; raise StoreError if broken."""

    def stats(self) -> dict[str, Any]:
        return {}

    # ---- data ------------------------------------------------------------

    @abstractmethod
    def get(self, key: Key, cursor: CursorKind = CursorKind.OVERWRITE) -> bytes | None:
        pass

    @abstractmethod
    def put(
        self,
        key: Key,
        value: bytes,
        overwrite: bool = True,
        cursor: CursorKind = CursorKind.OVERWRITE,
    ) -> None:
        """
        Write a key-value pair.

        Args:
            key: Row-store key or row number
            value: Value bytes
            overwrite: Upsert when True; when False an existing key raises
                DuplicateKeyError
            cursor: Standing cursor to position on the written key
        """

    @abstractmethod
    def delete(self, key: Key, cursor: CursorKind = CursorKind.OVERWRITE) -> bool:
        pass

    @abstractmethod
    def cursor_next(self, kind: CursorKind = CursorKind.OVERWRITE) -> Item | None:
        pass

    @abstractmethod
    def cursor_prev(self, kind: CursorKind = CursorKind.OVERWRITE) -> Item | None:
        pass

    @abstractmethod
    def append(self, value: bytes) -> int:
        """
        Store ``value`` under a new row number and return it.

        The returned row is strictly greater than every row the store has
        ever assigned or had written.
        """

    @abstractmethod
    def bulk_append(self, key: bytes | None, value: bytes) -> int | None:
        """
        Ordered-load insert used for initial population.

        Row-store keys must arrive in increasing order; column stores
        ignore ``key`` and assign the next row number, which is returned.
        """

    def bulk_session(self):
        """Context manager grouping a run of bulk_append calls."""
        return nullcontext()

    # ---- helpers for implementations ------------------------------------

    def _require_column(self, operation: str) -> None:
        if not self.variant.is_column:
            raise UnsupportedOperationError(
                f"{operation} requires a column-store variant", side=self.side, operation=operation
            )

    def _check_bulk_order(self, key: bytes, last: bytes | None) -> None:
        if self.collation is not Collation.DEFAULT:
            raise UnsupportedOperationError(
                "bulk load requires the default collation", side=self.side, operation="bulk"
            )
        if last is not None and key <= last:
            raise StoreError(
                "bulk load keys must be strictly increasing", side=self.side, operation="bulk"
            )

    def _open_cursor(self, kind: CursorKind) -> StoreCursor:
        return StoreCursor(kind)

    def _close_cursor(self, cursor: StoreCursor) -> None:
        pass

    @abstractmethod
    def _open(self) -> None:
        pass

    @abstractmethod
    def _close(self) -> None:
        pass
