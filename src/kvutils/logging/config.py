"""
Logging configuration for kvcheck.

Provides setup functions for configuring application-wide logging
with support for file rotation, console output, and JSON formatting.
The operation trace (one line per driver step when operation logging
is enabled) goes to the ``kvcheck.ops`` logger and can be split into its
own file.
"""

import logging
import logging.handlers
import os
import sys

from .formatters import ConsoleFormatter, JSONFormatter

OPS_LOGGER_NAME = "kvcheck.ops"
PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _file_handler(path: str, max_bytes: int, backup_count: int) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    return logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def _build_formatter(json_format: bool, app_name: str, console: bool) -> logging.Formatter:
    if json_format:
        return JSONFormatter(app_name=app_name, include_source=not console)
    if console:
        return ConsoleFormatter(use_colors=True)
    return logging.Formatter(fmt=PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    console_output: bool = True,
    json_format: bool = False,
    ops_log_file: str | None = None,
    app_name: str = "kvcheck",
    max_bytes: int = 100 * 1024 * 1024,  # 100MB
    backup_count: int = 5,
) -> None:
    """
    Configure logging for a kvcheck process

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Rotating log file; file logging is off when None
        console_output: Log to stderr
        json_format: Emit JSON lines on every root handler
        ops_log_file: Separate file for the per-operation trace; when set,
            operation lines no longer propagate to the root handlers
        app_name: Value of the ``app`` field in JSON lines
        max_bytes: Size at which log files rotate
        backup_count: Rotated files kept per log
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    targets = []
    if console_output:
        targets.append((logging.StreamHandler(sys.stderr), True))
    if log_file:
        targets.append((_file_handler(log_file, max_bytes, backup_count), False))

    for handler, console in targets:
        handler.setLevel(numeric_level)
        handler.setFormatter(_build_formatter(json_format, app_name, console))
        root_logger.addHandler(handler)

    ops_logger = logging.getLogger(OPS_LOGGER_NAME)
    for handler in ops_logger.handlers[:]:
        handler.close()
        ops_logger.removeHandler(handler)
    ops_logger.propagate = True

    if ops_log_file:
        # Bare message lines, matching the operation trace format
        ops_handler = _file_handler(ops_log_file, max_bytes, backup_count)
        ops_handler.setFormatter(logging.Formatter(fmt="%(message)s"))
        ops_logger.addHandler(ops_handler)
        ops_logger.setLevel(logging.DEBUG)
        ops_logger.propagate = False

    logging.getLogger("opentelemetry").setLevel(logging.WARNING)
    logging.getLogger("grpc").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging initialized: level={level}, file={log_file or 'none'}, "
        f"console={console_output}, json={json_format}, ops_file={ops_log_file or 'none'}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def shutdown_logging() -> None:
    """
    Shutdown logging and release all file handles.

    Call this during application shutdown so rotating file handlers
    do not leak descriptors between runs.
    """
    for logger in (logging.getLogger(), logging.getLogger(OPS_LOGGER_NAME)):
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    logging.shutdown()


def configure_from_env() -> None:
    """
    Configure logging from environment variables

    Environment variables:
        KVCHECK_LOG_LEVEL: Log level (default: INFO)
        KVCHECK_LOG_FILE: Log file path (default: none)
        KVCHECK_LOG_JSON: Use JSON format (default: false)
        KVCHECK_LOG_CONSOLE: Enable console output (default: true)
        KVCHECK_OPS_LOG_FILE: Operation trace file (default: none)
    """
    level = os.getenv("KVCHECK_LOG_LEVEL", "INFO")
    log_file = os.getenv("KVCHECK_LOG_FILE")
    json_format = os.getenv("KVCHECK_LOG_JSON", "false").lower() in ("true", "1", "yes")
    console_output = os.getenv("KVCHECK_LOG_CONSOLE", "true").lower() in ("true", "1", "yes")
    ops_log_file = os.getenv("KVCHECK_OPS_LOG_FILE")

    setup_logging(
        level=level,
        log_file=log_file,
        console_output=console_output,
        json_format=json_format,
        ops_log_file=ops_log_file,
    )
