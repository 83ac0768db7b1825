"""
Tracing utilities for OpenTelemetry.

Provides the @traced decorator used on use cases, get_tracer() for manual
spans around Anthropic calls, and set_span_attributes() for tagging the
active span with domain values (idea date, feature, quota).
"""

import functools
import logging
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_DEFAULT_TRACER_NAME = "bad-idea-api"


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    """Get an OpenTelemetry tracer, defaulting to the service tracer."""
    return trace.get_tracer(name or _DEFAULT_TRACER_NAME)


def traced(
    _func: Optional[Callable] = None,
    *,
    name: Optional[str] = None,
    kind: SpanKind = SpanKind.INTERNAL,
) -> Union[Callable[[F], F], F]:
    """
    Decorator that wraps a synchronous call in a span.

    Exceptions mark the span as errored and are re-raised. Do not use on
    generator functions: the span would close before iteration starts.

    Example:
        @traced
        def execute(self, target_date):
            ...

        @traced(name="ideas.pregenerate")
        def pregenerate(self, target_date):
            ...
    """

    def decorator(func: F) -> F:
        span_name = name or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with get_tracer().start_as_current_span(span_name, kind=kind) as span:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise

        return wrapper  # type: ignore

    if _func is not None:
        return decorator(_func)
    return decorator


def set_span_attributes(attributes: Dict[str, Any]) -> None:
    """Add attributes to the current span, skipping None values."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
