"""
In-process ordered store, the default oracle.

Keys are kept in a sorted list maintained with ``bisect`` alongside a
dict of values. The reverse collation is served by walking the same
list in the opposite direction.
"""

import logging
from bisect import bisect_left, bisect_right, insort
from typing import Any

from ..config import Collation, SchemaVariant
from ..errors import DuplicateKeyError, StoreError
from .base import CursorKind, Item, Key, StorageAdapter

logger = logging.getLogger(__name__)

ZERO = b"\x00"


class MemoryStore(StorageAdapter):
    """
    Sorted-dict store with fixed-length column semantics.

    For the FIX variant every row number that was never written reads
    back as a zero byte, and delete writes a zero rather than removing
    the row.
    """

    name = "memory"

    def __init__(self, variant: SchemaVariant, collation: Collation = Collation.DEFAULT,
                 bitcnt: int = 8, side: str = "oracle"):
        super().__init__(variant, collation, bitcnt, side)
        self._keys: list[Key] = []
        self._data: dict[Key, bytes] = {}
        self._high = 0  # highest row number assigned or written

    def _open(self) -> None:
        self._keys = []
        self._data = {}
        self._high = 0

    def _close(self) -> None:
        self._keys = []
        self._data = {}

    def _check_open(self, operation: str) -> None:
        if not self.is_open:
            raise StoreError("store is not open", side=self.side, operation=operation)

    def _store(self, key: Key, value: bytes) -> None:
        if key not in self._data:
            insort(self._keys, key)
        self._data[key] = value
        if isinstance(key, int) and key > self._high:
            self._high = key

    # ---- data ------------------------------------------------------------

    def get(self, key: Key, cursor: CursorKind = CursorKind.OVERWRITE) -> bytes | None:
        self._check_open("get")
        position = self.cursor(cursor)

        value = self._data.get(key)
        if value is None:
            position.reset()
            if self.variant is SchemaVariant.FIX and key >= 1:
                return ZERO
            return None
        position.position = key
        return value

    def put(
        self,
        key: Key,
        value: bytes,
        overwrite: bool = True,
        cursor: CursorKind = CursorKind.OVERWRITE,
    ) -> None:
        self._check_open("put")
        if not overwrite and key in self._data:
            raise DuplicateKeyError("key exists", side=self.side, operation="put")
        self._store(key, value)
        self.cursor(cursor).position = key

    def delete(self, key: Key, cursor: CursorKind = CursorKind.OVERWRITE) -> bool:
        self._check_open("delete")
        position = self.cursor(cursor)

        if self.variant is SchemaVariant.FIX:
            self._store(key, ZERO)
            position.position = key
            return True

        if key not in self._data:
            position.reset()
            return False

        del self._data[key]
        del self._keys[bisect_left(self._keys, key)]
        position.position = key
        return True

    def _step(self, kind: CursorKind, forward: bool) -> Item | None:
        position = self.cursor(kind)
        if self.collation is Collation.REVERSE:
            forward = not forward

        current = position.position
        if forward:
            index = 0 if current is None else bisect_right(self._keys, current)
            found = index < len(self._keys)
        else:
            index = len(self._keys) - 1 if current is None else bisect_left(self._keys, current) - 1
            found = index >= 0

        if not found:
            position.reset()
            return None

        key = self._keys[index]
        position.position = key
        return key, self._data[key]

    def cursor_next(self, kind: CursorKind = CursorKind.OVERWRITE) -> Item | None:
        self._check_open("next")
        return self._step(kind, forward=True)

    def cursor_prev(self, kind: CursorKind = CursorKind.OVERWRITE) -> Item | None:
        self._check_open("prev")
        return self._step(kind, forward=False)

    def append(self, value: bytes) -> int:
        self._check_open("append")
        self._require_column("append")

        row = self._high + 1
        self._store(row, value)
        self.cursor(CursorKind.INSERT).position = row
        return row

    def bulk_append(self, key: bytes | None, value: bytes) -> int | None:
        self._check_open("bulk")
        if self.variant.is_column:
            return self.append(value)

        self._check_bulk_order(key, self._keys[-1] if self._keys else None)
        self._store(key, value)
        return None

    def stats(self) -> dict[str, Any]:
        return {"entries": len(self._keys), "high_row": self._high}
