from __future__ import annotations

import hubp2p_api.main as api_main
import pytest
from hubp2p_api.core.config import Settings

from tests.helpers import FakeRedis, create_test_client


class FakeEngine:
    def __init__(self) -> None:
        self.disposed = False

    async def dispose(self) -> None:
        self.disposed = True


class FakeRateClient:
    def __init__(self) -> None:
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeRateClientFactory:
    def __init__(self, rate_client: FakeRateClient) -> None:
        self._rate_client = rate_client

    def __call__(self, _settings: Settings) -> FakeRateClientFactory:
        return self

    def create(self) -> FakeRateClient:
        return self._rate_client


def _patch_lifespan(monkeypatch: pytest.MonkeyPatch, app_env: str) -> dict[str, object]:
    resources: dict[str, object] = {
        "engine": FakeEngine(),
        "redis_client": FakeRedis(),
        "rate_client": FakeRateClient(),
        "session_factory": object(),
        "init_db": 0,
    }

    async def fake_init_db(_engine: FakeEngine, _settings: Settings) -> None:
        resources["init_db"] = int(resources["init_db"]) + 1  # type: ignore[arg-type]

    monkeypatch.setattr(
        api_main, "get_settings", lambda: Settings(app_env=app_env, service_name="hubp2p-api-test")
    )
    monkeypatch.setattr(api_main, "configure_logging", lambda *_args: None)
    monkeypatch.setattr(api_main, "configure_otel", lambda _service: None)
    monkeypatch.setattr(api_main, "build_engine", lambda _dsn: resources["engine"])
    monkeypatch.setattr(
        api_main, "build_session_factory", lambda _engine: resources["session_factory"]
    )
    monkeypatch.setattr(
        api_main, "redis_from_url", lambda _url, decode_responses: resources["redis_client"]
    )
    rate_client_factory = FakeRateClientFactory(resources["rate_client"])  # type: ignore[arg-type]
    monkeypatch.setattr(api_main, "RateClientFactory", rate_client_factory)
    monkeypatch.setattr(api_main, "init_db", fake_init_db)
    return resources


def test_lifespan_initializes_state_and_closes_resources(monkeypatch: pytest.MonkeyPatch) -> None:
    resources = _patch_lifespan(monkeypatch, "local")

    with create_test_client(api_main.app) as client:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert "X-Trace-Id" in response.headers
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        paths = client.get("/openapi.json").json()["paths"]
        assert "/transactions" in paths
        assert "/quotes" in paths
        assert client.app.state.engine is resources["engine"]
        assert client.app.state.session_factory is resources["session_factory"]
        assert client.app.state.rate_service is not None

    assert resources["init_db"] == 1
    assert resources["redis_client"].closed is True  # type: ignore[attr-defined]
    assert resources["rate_client"].closed is True  # type: ignore[attr-defined]
    assert resources["engine"].disposed is True  # type: ignore[attr-defined]


def test_lifespan_skips_init_db_when_not_local(monkeypatch: pytest.MonkeyPatch) -> None:
    resources = _patch_lifespan(monkeypatch, "prod")

    with create_test_client(api_main.app) as client:
        assert client.get("/health").status_code == 200

    assert resources["init_db"] == 0
    assert resources["engine"].disposed is True  # type: ignore[attr-defined]
