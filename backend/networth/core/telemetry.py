"""OpenTelemetry wiring for valuation runs.

The services only talk to the OpenTelemetry API (``trace.get_tracer`` and
``metrics.get_meter``). Until :func:`setup_telemetry` installs SDK providers
those calls are no-ops, so tests and scripts run without a collector.
"""

from __future__ import annotations

import logging
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
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

from networth.config import AppSettings

logger = logging.getLogger(__name__)

_METRIC_EXPORT_INTERVAL_MS = 10000
# Providers installed by setup_telemetry, flushed by shutdown_telemetry.
_PROVIDERS: list[Any] = []


def _resource(settings: AppSettings) -> Resource:
    return Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "networth",
        }
    )


def _exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def setup_telemetry(settings: AppSettings, engine: AsyncEngine | None = None) -> bool:
    """Install OTLP trace, metric and log exporters.

    When ``engine`` is given its queries are traced as child spans of the
    valuation spans. Returns ``True`` when telemetry is active after the call.
    """

    if _PROVIDERS:
        return True

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    resource = _resource(settings)
    options = _exporter_options(settings)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**options)))
    trace.set_tracer_provider(tracer_provider)

    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[
            PeriodicExportingMetricReader(
                OTLPMetricExporter(**options),
                export_interval_millis=_METRIC_EXPORT_INTERVAL_MS,
            )
        ],
    )
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**options)))
    set_logger_provider(logger_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)

    SystemMetricsInstrumentor().instrument(meter_provider=meter_provider)
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=tracer_provider)

    _PROVIDERS.extend([tracer_provider, meter_provider, logger_provider])
    logger.info(
        "Telemetry exporting to %s", settings.telemetry_otlp_endpoint or "the default OTLP endpoint"
    )
    return True


def shutdown_telemetry() -> None:
    """Flush and close the providers installed by :func:`setup_telemetry`."""

    while _PROVIDERS:
        _PROVIDERS.pop().shutdown()


__all__ = ["setup_telemetry", "shutdown_telemetry"]
