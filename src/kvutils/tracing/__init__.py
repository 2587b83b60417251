"""
Tracing of harness run phases using OpenTelemetry.

Each run and each phase within it (bulk load, read scan, operations,
dump comparison, teardown) is wrapped in a span, so a failing run in a
long campaign can be located in a trace backend.
"""

from .context import add_span_attributes, add_span_event, trace_operation
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "add_span_attributes",
    "add_span_event",
]
