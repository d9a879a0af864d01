from __future__ import annotations

from dataclasses import dataclass

import pytest

from shared.observability import otel


@dataclass
class FakeTracerProvider:
    resource: object
    span_processors: list[object]

    def __init__(self, resource: object) -> None:
        self.resource = resource
        self.span_processors = []

    def add_span_processor(self, processor: object) -> None:
        self.span_processors.append(processor)


@dataclass
class FakeMeterProvider:
    resource: object
    metric_readers: list[object]

    def __init__(self, resource: object, metric_readers: list[object]) -> None:
        self.resource = resource
        self.metric_readers = metric_readers


def _patch_providers(monkeypatch: pytest.MonkeyPatch, calls: dict[str, list[object]]) -> None:
    monkeypatch.setattr(otel, "TracerProvider", FakeTracerProvider)
    monkeypatch.setattr(otel, "MeterProvider", FakeMeterProvider)
    monkeypatch.setattr(otel, "OTLPSpanExporter", lambda: "otlp-trace")
    monkeypatch.setattr(otel, "ConsoleSpanExporter", lambda: "console-trace")
    monkeypatch.setattr(otel, "OTLPMetricExporter", lambda: "otlp-metric")
    monkeypatch.setattr(otel, "ConsoleMetricExporter", lambda: "console-metric")
    monkeypatch.setattr(
        otel,
        "BatchSpanProcessor",
        lambda exporter: calls["trace_exporters"].append(exporter) or ("span", exporter),
    )
    monkeypatch.setattr(
        otel,
        "PeriodicExportingMetricReader",
        lambda exporter: calls["metric_exporters"].append(exporter) or ("metric", exporter),
    )
    monkeypatch.setattr(
        otel.trace, "set_tracer_provider", lambda provider: calls["trace_set"].append(provider)
    )
    monkeypatch.setattr(
        otel.metrics, "set_meter_provider", lambda provider: calls["metric_set"].append(provider)
    )


def _calls() -> dict[str, list[object]]:
    return {"trace_set": [], "metric_set": [], "trace_exporters": [], "metric_exporters": []}


def test_build_resource_uses_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "ci")

    attributes = otel._build_resource("hubp2p-api").attributes

    assert attributes["service.name"] == "hubp2p-api"
    assert attributes["service.namespace"] == "hubp2p"
    assert attributes["deployment.environment"] == "ci"


def test_configure_otel_is_idempotent_per_service_and_selects_exporters(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    otel._initialized_services.clear()
    calls = _calls()
    monkeypatch.setenv("OTEL_TRACES_EXPORTER", "otlp")
    monkeypatch.setenv("OTEL_METRICS_EXPORTER", "OTLP")
    _patch_providers(monkeypatch, calls)

    otel.configure_otel("hubp2p-api")
    otel.configure_otel("hubp2p-api")

    assert otel._initialized_services == {"hubp2p-api"}
    assert calls["trace_exporters"] == ["otlp-trace"]
    assert calls["metric_exporters"] == ["otlp-metric"]
    assert len(calls["trace_set"]) == 1
    assert len(calls["metric_set"]) == 1


def test_configure_otel_uses_console_exporters_by_default(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    otel._initialized_services.clear()
    calls = _calls()
    monkeypatch.delenv("OTEL_TRACES_EXPORTER", raising=False)
    monkeypatch.delenv("OTEL_METRICS_EXPORTER", raising=False)
    _patch_providers(monkeypatch, calls)

    otel.configure_otel("hubp2p-worker")

    assert calls["trace_exporters"] == ["console-trace"]
    assert calls["metric_exporters"] == ["console-metric"]


def test_configure_otel_installs_no_exporters_when_disabled(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    otel._initialized_services.clear()
    calls = _calls()
    monkeypatch.setenv("OTEL_TRACES_EXPORTER", "none")
    monkeypatch.setenv("OTEL_METRICS_EXPORTER", "none")
    _patch_providers(monkeypatch, calls)

    otel.configure_otel("hubp2p-api")

    assert calls["trace_exporters"] == []
    assert calls["metric_exporters"] == []
    provider = calls["trace_set"][0]
    assert provider.span_processors == []  # type: ignore[attr-defined]
    assert calls["metric_set"][0].metric_readers == []  # type: ignore[attr-defined]
    otel._initialized_services.clear()
