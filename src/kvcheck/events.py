"""
Message and progress sinks.

Components never print; they hand operation trace lines and progress
counters to the EventHandler injected into the run context.
"""

import logging
from abc import ABC, abstractmethod

from kvutils.logging.config import OPS_LOGGER_NAME
from kvutils.metrics import HarnessMetrics
from kvutils.tracing import add_span_event

logger = logging.getLogger(__name__)


class EventHandler(ABC):
    """Receiver for operation trace lines and phase progress."""

    @abstractmethod
    def on_message(self, message: str) -> None:
        pass

    @abstractmethod
    def on_progress(self, operation: str, counter: int) -> None:
        """
        Report progress of a run phase.

        Args:
            operation: Phase label, e.g. "bulk load" or "read row scan"
            counter: Monotonically increasing count within the phase
        """
        pass


class NullEventHandler(EventHandler):
    """Silent runs."""

    def on_message(self, message: str) -> None:
        pass

    def on_progress(self, operation: str, counter: int) -> None:
        pass


class LoggingEventHandler(EventHandler):
    """
    Route trace lines to the ``kvcheck.ops`` logger and progress to the
    module logger, the metrics gauge and the current span.
    """

    def __init__(self, metrics: HarnessMetrics | None = None):
        self.metrics = metrics
        self.ops_logger = logging.getLogger(OPS_LOGGER_NAME)

    def on_message(self, message: str) -> None:
        self.ops_logger.info(message)

    def on_progress(self, operation: str, counter: int) -> None:
        logger.debug(f"{operation}: {counter}")
        if self.metrics is not None:
            self.metrics.record_progress(operation, counter)
        add_span_event("progress", operation=operation, counter=counter)
