from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI

from shared.logging import CorrelationMiddleware, get_correlation_context
from tests.helpers import create_test_client


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(CorrelationMiddleware)

    @app.get("/echo")
    def echo_context() -> dict[str, str]:
        return get_correlation_context()

    @app.get("/boom")
    def raise_error() -> None:
        raise RuntimeError("forced")

    return app


def test_correlation_middleware_enriches_context_from_headers() -> None:
    app = _build_app()

    with create_test_client(app) as client:
        response = client.get("/echo", headers={"X-User-Id": "user-demo-001"})

    payload = response.json()
    assert response.status_code == 200
    assert payload["user_id"] == "user-demo-001"
    assert "trace_id" in payload
    assert get_correlation_context() == {}


def test_correlation_middleware_clears_context_even_when_handler_fails() -> None:
    app = _build_app()
    with create_test_client(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert get_correlation_context() == {}


def test_correlation_middleware_logs_one_line_per_request(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="hubp2p.http")

    with create_test_client(_build_app(), raise_server_exceptions=False) as client:
        client.get("/echo")
        client.get("/boom")

    records = [record for record in caplog.records if record.name == "hubp2p.http"]
    assert [record.extra_fields["status_code"] for record in records] == [200, 500]
    assert records[0].extra_fields["path"] == "/echo"
    assert records[1].extra_fields["method"] == "GET"
