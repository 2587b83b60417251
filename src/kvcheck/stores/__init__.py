"""
Storage adapters and their lifecycle helpers.

Stores are looked up by name so either implementation can play either
role (``RunConfig.validate`` refuses a zero-filling FIX sut over a
non-zero-filling oracle); ``open_stores`` guarantees both are torn down on
every exit path.
"""

import logging
import os
from contextlib import ExitStack, contextmanager
from typing import Iterator

from ..config import RunConfig
from ..errors import ConfigurationError, ResourceBusyError
from .base import CursorKind, Item, Key, StorageAdapter, StoreCursor
from .memory import MemoryStore
from .sqlite import MEMORY_PATH, SqliteStore

logger = logging.getLogger(__name__)

STORES: dict[str, type[StorageAdapter]] = {
    MemoryStore.name: MemoryStore,
    SqliteStore.name: SqliteStore,
}


def create_store(name: str, config: RunConfig, role: str) -> StorageAdapter:
    """
    Build an unopened store for one side of a run.

    Args:
        name: Registered store name ("sqlite" or "memory")
        config: Run configuration
        role: "sut" or "oracle"; used as the side label and file name
    """
    store_cls = STORES.get(name)
    if store_cls is None:
        raise ConfigurationError(
            f"unknown store {name!r}; choose from {', '.join(sorted(STORES))}"
        )

    if store_cls is SqliteStore:
        path = MEMORY_PATH
        if config.home:
            os.makedirs(config.home, exist_ok=True)
            path = os.path.join(config.home, f"{role}.db")
        return SqliteStore(
            config.variant,
            config.collation,
            config.bitcnt,
            side=role,
            path=path,
            page_size=config.page_size,
            cache_pages=config.cache_pages,
        )

    return store_cls(config.variant, config.collation, config.bitcnt, side=role)


def teardown(store: StorageAdapter) -> None:
    """Close cursors, sync and close. A busy sync is logged and tolerated."""
    if not store.is_open:
        return
    try:
        store.close_cursors()
        try:
            store.sync()
        except ResourceBusyError as e:
            logger.warning(f"{store.side}: sync skipped: {e}")
    finally:
        store.close()


@contextmanager
def open_stores(config: RunConfig) -> Iterator[tuple[StorageAdapter, StorageAdapter]]:
    """
    Open the SUT and oracle for one run.

    On a clean exit both are synced via ``teardown``; when the body
    raises they are only closed.
    """
    sut = create_store(config.sut, config, "sut")
    oracle = create_store(config.oracle, config, "oracle")

    with ExitStack() as stack:
        stack.callback(oracle.close)
        stack.callback(sut.close)
        sut.open()
        oracle.open()
        yield sut, oracle
        teardown(sut)
        teardown(oracle)


__all__ = [
    "CursorKind",
    "Item",
    "Key",
    "MemoryStore",
    "SqliteStore",
    "StorageAdapter",
    "StoreCursor",
    "STORES",
    "create_store",
    "open_stores",
    "teardown",
]
