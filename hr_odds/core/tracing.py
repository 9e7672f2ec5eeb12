"""
Distributed tracing configuration using OpenTelemetry.

Provides automatic instrumentation for:
- FastAPI endpoints
- SQLAlchemy statements issued by the jobs
- Odds API requests (httpx)

plus a ``span`` helper the job runner wraps every run in. Spans go to the
console (development) and/or an OTLP endpoint (Jaeger, Tempo, ...).
Tracing is off unless ``OTEL_TRACES_ENABLED`` is set; ``span`` is a no-op
until a tracer provider is installed.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from opentelemetry import propagate, trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.trace import Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

logger = logging.getLogger(__name__)

_tracing_initialized = False


def init_tracing(
    app,
    engine,
    service_name: str,
    environment: str,
    version: str = "1.0.0",
    otlp_endpoint: Optional[str] = None,
    console_export: bool = False,
    sampling_ratio: float = 1.0,
) -> None:
    """
    Install a tracer provider and instrument FastAPI, SQLAlchemy and httpx.

    Args:
        app: FastAPI application to instrument
        engine: SQLAlchemy engine used by the jobs
        service_name: Name of this service (for trace identification)
        environment: Deployment environment
        version: Service version resource attribute
        otlp_endpoint: OTLP gRPC endpoint, e.g. http://jaeger:4317
        console_export: Export spans to stdout
        sampling_ratio: Fraction of traces to sample (0.0 to 1.0)
    """
    global _tracing_initialized

    if _tracing_initialized:
        logger.warning("Tracing already initialized, skipping")
        return

    resource = Resource.create({
        SERVICE_NAME: service_name,
        "deployment.environment": environment,
        "service.version": version,
    })
    tracer_provider = TracerProvider(resource=resource, sampler=TraceIdRatioBased(sampling_ratio))

    if console_export:
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
        logger.info(f"Added OTLP span exporter: {otlp_endpoint}")
    if not console_export and not otlp_endpoint:
        logger.warning("No span exporters configured, traces will not be exported")

    trace.set_tracer_provider(tracer_provider)
    propagate.set_global_textmap(TraceContextTextMapPropagator())

    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        excluded_urls="/health,/metrics,/docs,/openapi.json",
    )
    SQLAlchemyInstrumentor().instrument(engine=engine, tracer_provider=tracer_provider)
    HTTPXClientInstrumentor().instrument(tracer_provider=tracer_provider)

    _tracing_initialized = True
    logger.info(f"OpenTelemetry tracing initialized: service={service_name}, env={environment}")


@contextmanager
def span(name: str, attributes: Optional[dict] = None):
    """
    Context manager for a custom span.

    Example:
        with span("job.odds", {"job": "odds"}):
            ...
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(name, attributes=attributes) as current:
        yield current


def add_span_attributes(**attributes) -> None:
    """Add attributes to the current span."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        current_span.set_attributes(attributes)


def record_exception(exception: Exception, attributes: Optional[dict] = None) -> None:
    """Mark the current span as failed and attach the exception."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        current_span.record_exception(exception)
        current_span.set_status(Status(StatusCode.ERROR, str(exception)))
        if attributes:
            current_span.set_attributes(attributes)


def get_trace_id() -> Optional[str]:
    """Current trace ID as hex, or None outside a recorded span."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context and span_context.trace_id:
            return format(span_context.trace_id, "032x")
    return None
