"""OpenTelemetry wiring for the valuation service.

Traces, metrics and logs go to an OTLP gRPC collector. Everything here is a
no-op unless ``telemetry_enabled`` is set; the valuation service still calls
the OpenTelemetry API, which falls back to the default no-op providers.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy.ext.asyncio import AsyncEngine

from app.config import AppSettings

logger = logging.getLogger(__name__)

_initialised = False
METRIC_EXPORT_INTERVAL_MS = 10000


def _resource(settings: AppSettings) -> Resource:
    return Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "portfolio-valuation",
        }
    )


def _exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def _install_providers(settings: AppSettings) -> tuple[TracerProvider, MeterProvider]:
    resource = _resource(settings)
    options = _exporter_options(settings)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**options)))
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(**options),
        export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**options)))
    set_logger_provider(logger_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)

    return tracer_provider, meter_provider


def setup_telemetry(
    app: FastAPI,
    settings: AppSettings,
    engine: Callable[[], AsyncEngine] | None = None,
) -> bool:
    """Install providers and instrument the app once per process.

    ``engine`` is a factory so the database engine is only created when
    SQLAlchemy instrumentation is actually wanted. Returns whether telemetry
    is active.
    """

    global _initialised  # noqa: PLW0603 - single initialisation guard

    if _initialised:
        return True
    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    tracer_provider, meter_provider = _install_providers(settings)
    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )
    SystemMetricsInstrumentor().instrument(meter_provider=meter_provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(
            engine=engine().sync_engine,
            tracer_provider=tracer_provider,
        )

    _initialised = True
    logger.info("Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "default OTLP endpoint")
    return True


__all__ = ["METRIC_EXPORT_INTERVAL_MS", "setup_telemetry"]
