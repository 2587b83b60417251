"""
Log formatters for kvcheck runs.

Records emitted inside a run carry ``run``, ``seed`` and ``variant`` through
``extra=``. Both formatters pull those out of the generic context so a
failing run can be located and replayed from its log line alone.
"""

import json
import logging
import sys
import traceback
from datetime import UTC, datetime

# Context fields that identify a run; rendered apart from the rest
RUN_FIELDS = ("run", "seed", "variant")

_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def split_context(record: logging.LogRecord) -> tuple[dict, dict]:
    """Return ``(run_fields, other_context)`` attached through ``extra=``."""
    run, other = {}, {}
    for key, value in record.__dict__.items():
        if key in _RESERVED or key.startswith("_"):
            continue
        if key in RUN_FIELDS:
            run[key] = value
        else:
            other[key] = value
    return run, other


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Layout: ``ts``, ``level``, ``logger``, ``message``, ``app``, then an
    optional ``run`` block (run/seed/variant), ``context`` for any other
    extra fields and ``exception`` when the record carries exc_info.
    """

    def __init__(self, app_name: str = "kvcheck", include_source: bool = False):
        super().__init__()
        self.app_name = app_name
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
        }

        run, context = split_context(record)
        if run:
            entry["run"] = run
        if context:
            entry["context"] = context

        if self.include_source:
            entry["source"] = f"{record.pathname}:{record.lineno}"

        if record.exc_info:
            exc_type, exc, tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "traceback": "".join(traceback.format_exception(exc_type, exc, tb)),
            }

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable console output.

    Run fields become a ``(run 2 seed 41 fix)`` prefix on the message, other
    context is appended as ``[key=value, ...]``.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def formatMessage(self, record: logging.LogRecord) -> str:
        run, context = split_context(record)
        message = record.message
        if run:
            tag = " ".join(f"{key} {run[key]}" if key != "variant" else str(run[key])
                           for key in RUN_FIELDS if key in run)
            message = f"({tag}) {message}"
        if context:
            message += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"

        levelname = record.levelname
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        if color:
            levelname = f"{color}{levelname}{self.RESET}"

        return self._style._fmt % {
            "asctime": record.asctime,
            "levelname": levelname,
            "name": record.name,
            "message": message,
        }
