"""
OpenTelemetry SDK configuration and initialization.

Configures TracerProvider, MeterProvider, and auto-instrumentation
for FastAPI, HTTPX (the Supabase and Anthropic clients both use it),
and logging.
"""

import logging
from typing import TYPE_CHECKING, Optional

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricExporter,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from backend.observability.metrics import IdeaMetrics

if TYPE_CHECKING:
    from backend.settings import Settings

logger = logging.getLogger(__name__)

# Track initialization state
_initialized = False


def configure_observability(settings: "Settings") -> None:
    """
    Configure OpenTelemetry SDK with tracing, metrics, and auto-instrumentation.

    Safe to call more than once; only the first enabled call installs
    providers.

    Args:
        settings: Application settings with OTel configuration.
    """
    global _initialized

    if _initialized:
        logger.debug("OpenTelemetry already initialized, skipping")
        return

    if not settings.otel_enabled:
        logger.info("OpenTelemetry disabled via settings")
        return

    resource_attributes = {
        SERVICE_NAME: settings.otel_service_name,
        SERVICE_VERSION: "1.0.0",
        "deployment.environment": settings.environment,
    }
    if settings.render_git_commit:
        resource_attributes["service.instance.id"] = settings.render_git_commit
    resource = Resource.create(resource_attributes)

    endpoint = settings.otel_exporter_otlp_endpoint
    protocol = _normalize_protocol(settings.otel_exporter_otlp_protocol)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(settings.otel_traces_sample_rate),
    )
    if endpoint:
        tracer_provider.add_span_processor(
            BatchSpanProcessor(_otlp_span_exporter(endpoint, protocol))
        )
    else:
        tracer_provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(tracer_provider)

    metric_exporter: MetricExporter = (
        _otlp_metric_exporter(endpoint, protocol) if endpoint else ConsoleMetricExporter()
    )
    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[
            PeriodicExportingMetricReader(
                metric_exporter,
                export_interval_millis=settings.otel_metrics_export_interval_ms,
            )
        ],
    )
    metrics.set_meter_provider(meter_provider)
    IdeaMetrics.reset()

    _configure_auto_instrumentation(settings.otel_log_correlation)

    _initialized = True
    logger.info(
        "OpenTelemetry initialized: service=%s, sample_rate=%.2f, endpoint=%s",
        settings.otel_service_name,
        settings.otel_traces_sample_rate,
        endpoint or "console",
    )


def _normalize_protocol(protocol: Optional[str]) -> str:
    """Return "grpc" or "http"; unknown values fall back to http."""
    value = (protocol or "http").lower()
    if value not in {"grpc", "http"}:
        logger.warning("Unknown OTLP protocol %r, using http", protocol)
        return "http"
    return value


def _otlp_span_exporter(endpoint: str, protocol: str):
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(endpoint=endpoint)

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

    # HTTP endpoint needs the /v1/traces suffix
    return OTLPSpanExporter(endpoint=endpoint.rstrip("/") + "/v1/traces")


def _otlp_metric_exporter(endpoint: str, protocol: str):
    if protocol == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

        return OTLPMetricExporter(endpoint=endpoint)

    from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

    return OTLPMetricExporter(endpoint=endpoint.rstrip("/") + "/v1/metrics")


def _configure_auto_instrumentation(log_correlation: bool) -> None:
    """Configure auto-instrumentation for FastAPI, HTTPX, and logging."""
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    FastAPIInstrumentor().instrument()
    HTTPXClientInstrumentor().instrument()
    logger.debug("FastAPI and HTTPX auto-instrumentation enabled")

    if log_correlation:
        from opentelemetry.instrumentation.logging import LoggingInstrumentor

        LoggingInstrumentor().instrument(set_logging_format=True)
        logger.debug("Logging auto-instrumentation enabled")


def shutdown_observability() -> None:
    """Flush and shut down OpenTelemetry providers."""
    global _initialized

    if not _initialized:
        return

    try:
        tracer_provider = trace.get_tracer_provider()
        if hasattr(tracer_provider, "shutdown"):
            tracer_provider.shutdown()

        meter_provider = metrics.get_meter_provider()
        if hasattr(meter_provider, "shutdown"):
            meter_provider.shutdown()
    except Exception as e:
        logger.error("Error during OpenTelemetry shutdown: %s", e)
    finally:
        _initialized = False
    logger.info("OpenTelemetry shutdown complete")
