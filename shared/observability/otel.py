from __future__ import annotations

import os

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

_initialized_services: set[str] = set()


def _build_resource(service_name: str) -> Resource:
    return Resource.create(
        {
            "service.name": service_name,
            "service.namespace": "hubp2p",
            "deployment.environment": os.getenv("APP_ENV", "local"),
        }
    )


def _exporter_mode(variable: str) -> str:
    return os.getenv(variable, "console").strip().lower()


def _span_processor() -> SpanProcessor | None:
    mode = _exporter_mode("OTEL_TRACES_EXPORTER")
    if mode == "none":
        return None
    if mode == "otlp":
        return BatchSpanProcessor(OTLPSpanExporter())
    return BatchSpanProcessor(ConsoleSpanExporter())


def _metric_readers() -> list[MetricReader]:
    mode = _exporter_mode("OTEL_METRICS_EXPORTER")
    if mode == "none":
        return []
    if mode == "otlp":
        return [PeriodicExportingMetricReader(OTLPMetricExporter())]
    return [PeriodicExportingMetricReader(ConsoleMetricExporter())]


def configure_otel(service_name: str) -> None:
    """Install tracer and meter providers once per process.

    OTEL_TRACES_EXPORTER / OTEL_METRICS_EXPORTER accept console (default), otlp or none.
    """
    if service_name in _initialized_services:
        return

    resource = _build_resource(service_name)

    tracer_provider = TracerProvider(resource=resource)
    processor = _span_processor()
    if processor is not None:
        tracer_provider.add_span_processor(processor)
    trace.set_tracer_provider(tracer_provider)

    meter_provider = MeterProvider(resource=resource, metric_readers=_metric_readers())
    metrics.set_meter_provider(meter_provider)

    _initialized_services.add(service_name)
