"""
Fixtures for OpenTelemetry observability unit tests.

Spans and metrics go to private in-memory providers injected by patching
the tracer/meter lookups, so no global provider is replaced.
"""

from unittest.mock import patch

import pytest

from backend.observability import config
from backend.observability.metrics import IdeaMetrics
from tests.fixtures.otel import MetricCapture, SpanCapture


@pytest.fixture
def span_capture() -> SpanCapture:
    capture = SpanCapture()
    with patch("backend.observability.tracing.get_tracer", capture.get_tracer):
        yield capture


@pytest.fixture
def metric_capture() -> MetricCapture:
    capture = MetricCapture()
    IdeaMetrics.reset()
    with patch("backend.observability.metrics._get_meter", capture.get_meter):
        yield capture
    IdeaMetrics.reset()


@pytest.fixture
def reset_otel_state():
    """Reset global OTel state between tests."""
    original_initialized = config._initialized
    config._initialized = False

    yield

    config._initialized = original_initialized
