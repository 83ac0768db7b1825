"""Shared test fixtures."""

from tests.fixtures.otel import (
    CapturedSpan,
    MetricCapture,
    SpanCapture,
    get_metric_value,
)

__all__ = [
    "CapturedSpan",
    "MetricCapture",
    "SpanCapture",
    "get_metric_value",
]
