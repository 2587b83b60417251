"""
Differential testing harness for key-value stores.

Drives a store under test and a reference store through the same
randomized inserts, updates, deletes, point reads and cursor moves, and
fails on the first observable difference between them.

Main components:
- generate: Deterministic key and value synthesis per row number
- stores: SQLite and in-memory storage adapters
- compare: Not-found reconciliation and side-by-side comparison
- driver, loader, scan: Operation, bulk load and audit phases
- runner: Run orchestration and summaries
- cli: Command-line interface
"""

__version__ = "1.0.0"

from .config import Collation, RunConfig, SchemaVariant, randomize_config
from .errors import (
    ConfigurationError,
    DuplicateKeyError,
    HarnessError,
    MismatchError,
    NotFoundMismatchError,
    ResourceBusyError,
    StoreError,
    UnsupportedOperationError,
)
from .generate import KeyValueGenerator
from .runner import Runner, RunSummary

__all__ = [
    "Collation",
    "ConfigurationError",
    "DuplicateKeyError",
    "HarnessError",
    "KeyValueGenerator",
    "MismatchError",
    "NotFoundMismatchError",
    "ResourceBusyError",
    "RunConfig",
    "RunSummary",
    "Runner",
    "SchemaVariant",
    "StoreError",
    "UnsupportedOperationError",
    "randomize_config",
]
