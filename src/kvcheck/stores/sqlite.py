"""
SQLite-backed store, the default system under test.

One table per run. The row variant keys it by the generated key (stored
as latin-1 TEXT so the collation sees the original byte order); the
column variants key it by an AUTOINCREMENT record number so appended
rows are never reused after a delete.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..config import Collation, SchemaVariant
from ..errors import DuplicateKeyError, ResourceBusyError, StoreError
from .base import CursorKind, Item, Key, StorageAdapter

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"
REVERSE_COLLATION = "reverse"


def _reverse_collate(a: str, b: str) -> int:
    return (a < b) - (a > b)


class SqliteStore(StorageAdapter):
    """
    Store backed by a single SQLite table.

    The connection runs in autocommit mode; ``bulk_session`` wraps an
    ordered load in one explicit transaction.
    """

    name = "sqlite"

    def __init__(
        self,
        variant: SchemaVariant,
        collation: Collation = Collation.DEFAULT,
        bitcnt: int = 8,
        side: str = "sut",
        path: str | Path = MEMORY_PATH,
        page_size: int = 4096,
        cache_pages: int = 2000,
    ):
        super().__init__(variant, collation, bitcnt, side)
        self.path = str(path)
        self.page_size = page_size
        self.cache_pages = cache_pages
        self.conn: sqlite3.Connection | None = None
        self._column = "recno" if variant.is_column else "k"
        self._last_bulk: bytes | None = None

    @contextmanager
    def _errors(self, operation: str, duplicate: bool = False):
        """Translate sqlite3 exceptions into StoreError, keeping the engine text."""
        try:
            yield
        except sqlite3.IntegrityError as e:
            if duplicate:
                raise DuplicateKeyError(str(e), side=self.side, operation=operation) from e
            raise StoreError(str(e), side=self.side, operation=operation) from e
        except sqlite3.Error as e:
            raise StoreError(str(e), side=self.side, operation=operation) from e

    def _schema(self) -> str:
        if self.variant is SchemaVariant.ROW:
            collate = REVERSE_COLLATION if self.collation is Collation.REVERSE else "BINARY"
            return (
                f"CREATE TABLE kv (k TEXT PRIMARY KEY COLLATE {collate}, "
                f"v BLOB NOT NULL) WITHOUT ROWID"
            )
        if self.variant is SchemaVariant.VAR:
            return "CREATE TABLE kv (recno INTEGER PRIMARY KEY AUTOINCREMENT, v BLOB NOT NULL)"
        return (
            "CREATE TABLE kv (recno INTEGER PRIMARY KEY AUTOINCREMENT, "
            f"v INTEGER NOT NULL CHECK (v >= 0 AND v < {1 << self.bitcnt}))"
        )

    def _open(self) -> None:
        if self.path != MEMORY_PATH:
            # Every run starts from an empty database
            for suffix in ("", "-wal", "-shm"):
                if os.path.exists(self.path + suffix):
                    os.remove(self.path + suffix)

        with self._errors("open"):
            self.conn = sqlite3.connect(self.path, isolation_level=None)
            self.conn.create_collation(REVERSE_COLLATION, _reverse_collate)
            self.conn.execute(f"PRAGMA page_size = {int(self.page_size)}")
            self.conn.execute("PRAGMA journal_mode = WAL")
            self.conn.execute(f"PRAGMA cache_size = {int(self.cache_pages)}")
            self.conn.execute(self._schema())
        self._last_bulk = None
        logger.debug(f"{self.side}: sqlite database at {self.path}")

    def _close(self) -> None:
        if self.conn is not None:
            try:
                self.conn.close()
            finally:
                self.conn = None

    def _db(self, operation: str) -> sqlite3.Connection:
        if self.conn is None:
            raise StoreError("store is not open", side=self.side, operation=operation)
        return self.conn

    # ---- key and value encoding -----------------------------------------

    def _to_db_key(self, key: Key) -> str | int:
        if isinstance(key, bytes):
            return key.decode("latin-1")
        return key

    def _from_db_key(self, key: str | int) -> Key:
        if isinstance(key, str):
            return key.encode("latin-1")
        return key

    def _to_db_value(self, value: bytes) -> bytes | int:
        if self.variant is SchemaVariant.FIX:
            return value[0] if value else 0
        return value

    def _from_db_value(self, value: bytes | int) -> bytes:
        if self.variant is SchemaVariant.FIX:
            return bytes([value])
        return bytes(value)

    # ---- data ------------------------------------------------------------

    def get(self, key: Key, cursor: CursorKind = CursorKind.OVERWRITE) -> bytes | None:
        db = self._db("get")
        position = self.cursor(cursor)

        with self._errors("get"):
            row = db.execute(
                f"SELECT v FROM kv WHERE {self._column} = ?", (self._to_db_key(key),)
            ).fetchone()

        if row is None:
            position.reset()
            return None
        position.position = key
        return self._from_db_value(row[0])

    def put(
        self,
        key: Key,
        value: bytes,
        overwrite: bool = True,
        cursor: CursorKind = CursorKind.OVERWRITE,
    ) -> None:
        db = self._db("put")
        verb = "INSERT OR REPLACE" if overwrite else "INSERT"

        with self._errors("put", duplicate=not overwrite):
            db.execute(
                f"{verb} INTO kv ({self._column}, v) VALUES (?, ?)",
                (self._to_db_key(key), self._to_db_value(value)),
            )
        self.cursor(cursor).position = key

    def delete(self, key: Key, cursor: CursorKind = CursorKind.OVERWRITE) -> bool:
        db = self._db("delete")
        position = self.cursor(cursor)

        if self.variant is SchemaVariant.FIX:
            sql = "UPDATE kv SET v = 0 WHERE recno = ?"
        else:
            sql = f"DELETE FROM kv WHERE {self._column} = ?"

        with self._errors("delete"):
            count = db.execute(sql, (self._to_db_key(key),)).rowcount

        if count == 0:
            position.reset()
            return False
        position.position = key
        return True

    def _step(self, kind: CursorKind, forward: bool) -> Item | None:
        db = self._db("next" if forward else "prev")
        position = self.cursor(kind)
        column = self._column
        order = "ASC" if forward else "DESC"

        if position.position is None:
            sql = f"SELECT {column}, v FROM kv ORDER BY {column} {order} LIMIT 1"
            params: tuple = ()
        else:
            op = ">" if forward else "<"
            sql = f"SELECT {column}, v FROM kv WHERE {column} {op} ? ORDER BY {column} {order} LIMIT 1"
            params = (self._to_db_key(position.position),)

        with self._errors("next" if forward else "prev"):
            row = db.execute(sql, params).fetchone()

        if row is None:
            position.reset()
            return None

        key = self._from_db_key(row[0])
        position.position = key
        return key, self._from_db_value(row[1])

    def cursor_next(self, kind: CursorKind = CursorKind.OVERWRITE) -> Item | None:
        return self._step(kind, forward=True)

    def cursor_prev(self, kind: CursorKind = CursorKind.OVERWRITE) -> Item | None:
        return self._step(kind, forward=False)

    def append(self, value: bytes) -> int:
        db = self._db("append")
        self._require_column("append")

        with self._errors("append"):
            row = db.execute("INSERT INTO kv (v) VALUES (?)", (self._to_db_value(value),)).lastrowid
        self.cursor(CursorKind.INSERT).position = row
        return row

    def bulk_append(self, key: bytes | None, value: bytes) -> int | None:
        if self.variant.is_column:
            return self.append(value)

        self._check_bulk_order(key, self._last_bulk)
        db = self._db("bulk")
        with self._errors("bulk", duplicate=True):
            db.execute("INSERT INTO kv (k, v) VALUES (?, ?)", (self._to_db_key(key), value))
        self._last_bulk = key
        return None

    @contextmanager
    def bulk_session(self):
        db = self._db("bulk")
        with self._errors("bulk"):
            db.execute("BEGIN")
        try:
            yield self
        except BaseException:
            try:
                db.execute("ROLLBACK")
            except sqlite3.Error as e:
                logger.warning(f"{self.side}: rollback of failed bulk load: {e}")
            raise
        with self._errors("bulk"):
            db.execute("COMMIT")

    # ---- administration --------------------------------------------------

    def sync(self) -> None:
        db = self._db("sync")
        with self._errors("sync"):
            busy, _, _ = db.execute("PRAGMA wal_checkpoint(TRUNCATE)").fetchone()
        if busy:
            raise ResourceBusyError("checkpoint blocked by an active reader", side=self.side, operation="sync")

    def verify(self) -> None:
        db = self._db("verify")
        with self._errors("verify"):
            problems = [row[0] for row in db.execute("PRAGMA integrity_check")]
        if problems != ["ok"]:
            raise StoreError("; ".join(problems), side=self.side, operation="verify")

    def stats(self) -> dict[str, Any]:
        db = self._db("stats")
        with self._errors("stats"):
            result = {
                pragma: db.execute(f"PRAGMA {pragma}").fetchone()[0]
                for pragma in ("page_count", "page_size", "freelist_count", "journal_mode")
            }
            result["entries"] = db.execute("SELECT COUNT(*) FROM kv").fetchone()[0]
        return result
