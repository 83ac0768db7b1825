"""
Metrics definitions for the Bad Idea API.

Defines all metrics using the OpenTelemetry Meter API. Instruments are
created lazily so tests can swap the MeterProvider and reset the cache.
"""

import logging
from typing import Optional

from opentelemetry import metrics

logger = logging.getLogger(__name__)

_METER_NAME = "bad-idea-api"


def _get_meter() -> metrics.Meter:
    """Get the metrics meter instance."""
    return metrics.get_meter(_METER_NAME)


class IdeaMetrics:
    """
    Centralized metrics for the idea cache, usage ledger and AI calls.

    All metrics are lazily initialized on first access.
    """

    _idea_lookups_total: Optional[metrics.Counter] = None
    _generation_failures_total: Optional[metrics.Counter] = None
    _usage_recorded_total: Optional[metrics.Counter] = None
    _rate_limit_hits_total: Optional[metrics.Counter] = None
    _ledger_errors_total: Optional[metrics.Counter] = None
    _anthropic_total_seconds: Optional[metrics.Histogram] = None
    _active_sse_connections: Optional[metrics.UpDownCounter] = None

    @classmethod
    def reset(cls) -> None:
        """Drop cached instruments (used when the MeterProvider changes)."""
        cls._idea_lookups_total = None
        cls._generation_failures_total = None
        cls._usage_recorded_total = None
        cls._rate_limit_hits_total = None
        cls._ledger_errors_total = None
        cls._anthropic_total_seconds = None
        cls._active_sse_connections = None

    @classmethod
    def idea_lookups_total(cls) -> metrics.Counter:
        """Counter for daily idea lookups by outcome (hit, generated, placeholder)."""
        if cls._idea_lookups_total is None:
            cls._idea_lookups_total = _get_meter().create_counter(
                name="idea_lookups_total",
                description="Daily idea lookups by outcome",
                unit="1",
            )
        return cls._idea_lookups_total

    @classmethod
    def generation_failures_total(cls) -> metrics.Counter:
        """Counter for failed generator calls by kind."""
        if cls._generation_failures_total is None:
            cls._generation_failures_total = _get_meter().create_counter(
                name="generation_failures_total",
                description="Failed calls to the generative text backend",
                unit="1",
            )
        return cls._generation_failures_total

    @classmethod
    def usage_recorded_total(cls) -> metrics.Counter:
        """Counter for usage events appended to the ledger."""
        if cls._usage_recorded_total is None:
            cls._usage_recorded_total = _get_meter().create_counter(
                name="usage_recorded_total",
                description="Usage events recorded by feature",
                unit="1",
            )
        return cls._usage_recorded_total

    @classmethod
    def rate_limit_hits_total(cls) -> metrics.Counter:
        """Counter for rejected requests by feature."""
        if cls._rate_limit_hits_total is None:
            cls._rate_limit_hits_total = _get_meter().create_counter(
                name="rate_limit_hits_total",
                description="Total rate limit hits",
                unit="1",
            )
        return cls._rate_limit_hits_total

    @classmethod
    def ledger_errors_total(cls) -> metrics.Counter:
        """Counter for usage ledger read/write failures."""
        if cls._ledger_errors_total is None:
            cls._ledger_errors_total = _get_meter().create_counter(
                name="ledger_errors_total",
                description="Usage ledger store failures by operation",
                unit="1",
            )
        return cls._ledger_errors_total

    @classmethod
    def anthropic_total_seconds(cls) -> metrics.Histogram:
        """Histogram for total Anthropic request duration."""
        if cls._anthropic_total_seconds is None:
            cls._anthropic_total_seconds = _get_meter().create_histogram(
                name="anthropic_total_seconds",
                description="Total duration of Anthropic API requests",
                unit="s",
            )
        return cls._anthropic_total_seconds

    @classmethod
    def active_sse_connections(cls) -> metrics.UpDownCounter:
        """Gauge for active advisor chat streams."""
        if cls._active_sse_connections is None:
            cls._active_sse_connections = _get_meter().create_up_down_counter(
                name="active_sse_connections",
                description="Number of active SSE connections",
                unit="1",
            )
        return cls._active_sse_connections
