"""
OpenTelemetry Setup

Instruments FastAPI, SQLAlchemy and the httpx client used for mail delivery.
Enabled with TELEMETRY_ENABLED; spans are exported to the console.
"""
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from ..config import settings
import logging

logger = logging.getLogger(__name__)


def setup_telemetry(app, engine=None):
    """
    Setup OpenTelemetry instrumentation for FastAPI app

    Args:
        app: FastAPI application instance
        engine: SQLAlchemy engine to instrument (all engines when omitted)

    Returns:
        The configured TracerProvider
    """
    resource = Resource.create({
        "service.name": settings.telemetry_service_name,
        "service.version": "1.0.0",
        "deployment.environment": settings.environment,
    })

    tracer_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(tracer_provider)
    tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    FastAPIInstrumentor.instrument_app(app)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine)
    else:
        SQLAlchemyInstrumentor().instrument()
    HTTPXClientInstrumentor().instrument()

    logger.info("OpenTelemetry instrumentation enabled for requests, queries and mail calls")
    return tracer_provider


def shutdown_telemetry(tracer_provider) -> None:
    """Flush pending spans"""
    if tracer_provider is not None:
        tracer_provider.shutdown()
