"""
Span helpers for run phases.

Attribute values keep their type when OpenTelemetry accepts it (str,
bool, int, float); anything else is stored as its ``str``.
"""

from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .tracer import get_tracer

SPAN_PREFIX = "kvcheck."

# Attributes copied from a failing harness error onto its span
_ERROR_FIELDS = ("side", "operation", "row")


def _attr(value):
    if isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


def _attrs(attributes: dict) -> dict:
    return {key: _attr(value) for key, value in attributes.items() if value is not None}


@contextmanager
def trace_operation(name: str, **attributes):
    """
    Run the block inside a ``kvcheck.<name>`` span.

    An exception escaping the block marks the span as failed and is
    re-raised. Errors that carry ``side``, ``operation`` or ``row`` (store
    errors do) have those copied to ``error.<field>`` attributes.

    Example:
        >>> with trace_operation("bulk_load", rows=1000) as span:
        ...     span.set_attribute("loaded", loader.load())
    """
    tracer = get_tracer()

    with tracer.start_as_current_span(
        SPAN_PREFIX + name,
        attributes=_attrs(attributes),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            span.set_attribute("error.type", type(e).__name__)
            for field in _ERROR_FIELDS:
                value = getattr(e, field, None)
                if value is not None:
                    span.set_attribute(f"error.{field}", _attr(value))
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise


def add_span_attributes(**attributes) -> None:
    """Set attributes on the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(_attrs(attributes))


def add_span_event(name: str, **attributes) -> None:
    """Record an event (e.g. progress) on the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=_attrs(attributes))
