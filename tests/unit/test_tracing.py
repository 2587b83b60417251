"""
Unit tests for kvutils.tracing
"""

from unittest.mock import MagicMock, patch

import pytest

from kvcheck.errors import StoreError
from kvutils.tracing import add_span_attributes, add_span_event, trace_operation


@pytest.fixture
def tracer():
    tracer = MagicMock()
    with patch("kvutils.tracing.context.get_tracer", return_value=tracer):
        yield tracer


@pytest.fixture
def span(tracer):
    return tracer.start_as_current_span.return_value.__enter__.return_value


class TestTraceOperation:
    def test_span_name_and_typed_attributes(self, tracer, span):
        with trace_operation("bulk_load", rows=100, variant="row", home=None) as current:
            assert current is span

        args, kwargs = tracer.start_as_current_span.call_args
        assert args == ("kvcheck.bulk_load",)
        assert kwargs["attributes"] == {"rows": 100, "variant": "row"}

    def test_exception_recorded_and_reraised(self, span):
        with pytest.raises(ValueError):
            with trace_operation("read_scan"):
                raise ValueError("mismatch")

        span.set_attribute.assert_any_call("error.type", "ValueError")
        span.record_exception.assert_called_once()
        span.set_status.assert_called_once()

    def test_store_error_location_copied(self, span):
        with pytest.raises(StoreError):
            with trace_operation("operations"):
                raise StoreError("disk I/O error", side="sut", operation="put", row=12)

        span.set_attribute.assert_any_call("error.side", "sut")
        span.set_attribute.assert_any_call("error.operation", "put")
        span.set_attribute.assert_any_call("error.row", 12)


class TestCurrentSpanHelpers:
    @patch("kvutils.tracing.context.trace.get_current_span")
    def test_add_event_when_recording(self, mock_current):
        current = mock_current.return_value
        current.is_recording.return_value = True

        add_span_event("progress", counter=10, operation=b"dump")

        current.add_event.assert_called_once_with(
            "progress", attributes={"counter": 10, "operation": "b'dump'"}
        )

    @patch("kvutils.tracing.context.trace.get_current_span")
    def test_attributes_skipped_when_not_recording(self, mock_current):
        current = mock_current.return_value
        current.is_recording.return_value = False

        add_span_attributes(rows=5)

        current.set_attributes.assert_not_called()

    def test_helpers_without_active_span(self):
        add_span_event("progress", counter=1)
        add_span_attributes(rows=1)
