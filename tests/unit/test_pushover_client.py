from __future__ import annotations

import httpx
import pytest
from hubp2p_worker.core.errors import (
    NotConfiguredError,
    Pushover5xxError,
    PushoverRejectedError,
    PushoverTimeoutError,
)
from hubp2p_worker.providers.pushover import PushoverClient, PushoverMessage

_MESSAGES_PATH = "/1/messages.json"


class FakeHttpClient:
    def __init__(self) -> None:
        self.closed = False
        self.next_response: httpx.Response | None = None
        self.next_error: Exception | None = None
        self.requests: list[dict[str, object]] = []

    async def post(
        self, path: str, *, data: dict[str, str], headers: dict[str, str]
    ) -> httpx.Response:
        self.requests.append({"path": path, "data": data, "headers": headers})
        if self.next_error:
            raise self.next_error
        assert self.next_response is not None
        return self.next_response

    async def aclose(self) -> None:
        self.closed = True


def _response(status_code: int, payload: object) -> httpx.Response:
    request = httpx.Request("POST", f"https://api.pushover.net{_MESSAGES_PATH}")
    return httpx.Response(status_code, request=request, json=payload)


def _client(
    http_client: FakeHttpClient, *, token: str | None = "app-token", user_key: str | None = "user"
) -> PushoverClient:
    return PushoverClient(
        http_client,  # type: ignore[arg-type]
        messages_path=_MESSAGES_PATH,
        token=token,
        user_key=user_key,
        retry_seconds=60,
        expire_seconds=3600,
        sound="cashregister",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(("token", "user_key"), [(None, "user"), ("app-token", None)])
async def test_send_without_credentials_makes_no_http_call(
    token: str | None, user_key: str | None
) -> None:
    http_client = FakeHttpClient()

    with pytest.raises(NotConfiguredError, match="credentials are not configured"):
        await _client(http_client, token=token, user_key=user_key).send(
            PushoverMessage(title="t", message="m")
        )

    assert http_client.requests == []


@pytest.mark.asyncio
async def test_emergency_priority_adds_retry_and_expire() -> None:
    http_client = FakeHttpClient()
    http_client.next_response = _response(200, {"status": 1, "request": "req-1", "receipt": "rcpt"})

    receipt = await _client(http_client).send(
        PushoverMessage(
            title="Nova transação",
            message="Valor: R$ 100,00",
            url="https://painel.hubp2p.local/transactions/1",
            url_title="Abrir no painel",
        )
    )

    form = http_client.requests[0]["data"]
    assert http_client.requests[0]["path"] == _MESSAGES_PATH
    assert form == {
        "token": "app-token",
        "user": "user",
        "title": "Nova transação",
        "message": "Valor: R$ 100,00",
        "priority": "2",
        "retry": "60",
        "expire": "3600",
        "sound": "cashregister",
        "url": "https://painel.hubp2p.local/transactions/1",
        "url_title": "Abrir no painel",
    }
    assert receipt.reference == "rcpt"


@pytest.mark.asyncio
async def test_normal_priority_omits_emergency_fields() -> None:
    http_client = FakeHttpClient()
    http_client.next_response = _response(200, {"status": 1, "request": "req-2"})

    receipt = await _client(http_client).send(PushoverMessage(title="t", message="m", priority=0))

    form = http_client.requests[0]["data"]
    assert "retry" not in form  # type: ignore[operator]
    assert "expire" not in form  # type: ignore[operator]
    assert receipt.reference == "req-2"


@pytest.mark.asyncio
async def test_send_maps_5xx() -> None:
    http_client = FakeHttpClient()
    http_client.next_response = _response(503, {})

    with pytest.raises(Pushover5xxError, match="503"):
        await _client(http_client).send(PushoverMessage(title="t", message="m"))


@pytest.mark.asyncio
async def test_send_maps_rejection_errors() -> None:
    http_client = FakeHttpClient()
    http_client.next_response = _response(
        400, {"status": 0, "errors": ["user identifier is invalid"]}
    )

    with pytest.raises(PushoverRejectedError, match="user identifier is invalid"):
        await _client(http_client).send(PushoverMessage(title="t", message="m"))


@pytest.mark.asyncio
async def test_send_maps_timeout() -> None:
    http_client = FakeHttpClient()
    http_client.next_error = httpx.ReadTimeout("timeout")

    with pytest.raises(PushoverTimeoutError):
        await _client(http_client).send(PushoverMessage(title="t", message="m"))


@pytest.mark.asyncio
async def test_close_delegates_to_http_client() -> None:
    http_client = FakeHttpClient()

    await _client(http_client).close()

    assert http_client.closed is True
