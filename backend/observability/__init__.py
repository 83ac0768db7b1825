"""
OpenTelemetry observability package for the Bad Idea API.

Provides tracing, metrics and log correlation for the idea cache, the usage
ledger and the Anthropic calls behind them.

Usage:
    from backend.observability import (
        configure_observability,
        get_tracer,
        traced,
        IdeaMetrics,
    )

    # Initialize in application startup
    configure_observability(settings)

    # Use decorator for automatic tracing
    @traced
    def execute(self, target_date):
        ...

    # Access metrics
    IdeaMetrics.idea_lookups_total().add(1, {"outcome": "hit"})
"""

from backend.observability.config import configure_observability, shutdown_observability
from backend.observability.tracing import get_tracer, set_span_attributes, traced
from backend.observability.metrics import IdeaMetrics

__all__ = [
    # Configuration
    "configure_observability",
    "shutdown_observability",
    # Tracing
    "get_tracer",
    "set_span_attributes",
    "traced",
    # Metrics
    "IdeaMetrics",
]
