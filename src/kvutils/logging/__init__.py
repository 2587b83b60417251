"""
Structured logging configuration for kvcheck runs

Provides console and JSON formatted logging, with run-scoped context
(seed, variant, run number) attached to every record.

Usage:
    from kvutils.logging import setup_logging, get_logger

    # Setup logging (call once at startup)
    setup_logging(level="INFO", log_file="RUNDIR/kvcheck.log")

    # Get logger for your module
    logger = get_logger(__name__)

    # Log with context
    logger.info("Bulk load complete", extra={
        "variant": "row",
        "rows": 1000,
    })
"""

from .config import configure_from_env, get_logger, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
