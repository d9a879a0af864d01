from __future__ import annotations

from dataclasses import dataclass

import httpx

from hubp2p_worker.core.errors import (
    NotConfiguredError,
    Pushover5xxError,
    PushoverRejectedError,
    PushoverTimeoutError,
)
from shared.observability import inject_headers

_EMERGENCY_PRIORITY = 2


@dataclass(frozen=True)
class PushoverMessage:
    title: str
    message: str
    priority: int = _EMERGENCY_PRIORITY
    url: str | None = None
    url_title: str | None = None


@dataclass(frozen=True)
class PushoverReceipt:
    request_id: str | None
    receipt: str | None

    @property
    def reference(self) -> str | None:
        return self.receipt or self.request_id


class PushoverClient:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        messages_path: str,
        token: str | None,
        user_key: str | None,
        retry_seconds: int,
        expire_seconds: int,
        sound: str | None = None,
    ) -> None:
        self._http_client = http_client
        self._messages_path = messages_path
        self._token = token
        self._user_key = user_key
        self._retry_seconds = retry_seconds
        self._expire_seconds = expire_seconds
        self._sound = sound

    @property
    def is_configured(self) -> bool:
        return bool(self._token and self._user_key)

    async def send(self, message: PushoverMessage) -> PushoverReceipt:
        if not self.is_configured:
            raise NotConfiguredError()

        form = self._build_form(message)
        headers = inject_headers({"Accept": "application/json"})
        try:
            response = await self._http_client.post(self._messages_path, data=form, headers=headers)
        except httpx.TimeoutException as exc:
            raise PushoverTimeoutError() from exc
        except httpx.TransportError as exc:
            raise Pushover5xxError(f"Pushover transport error: {exc}") from exc

        if response.status_code >= 500:
            raise Pushover5xxError(f"Pushover returned {response.status_code}")
        body = _json_or_empty(response)
        if response.status_code >= 400 or body.get("status") != 1:
            errors = body.get("errors") or [f"HTTP {response.status_code}"]
            raise PushoverRejectedError("; ".join(str(item) for item in errors))
        return PushoverReceipt(request_id=body.get("request"), receipt=body.get("receipt"))

    def _build_form(self, message: PushoverMessage) -> dict[str, str]:
        form = {
            "token": self._token or "",
            "user": self._user_key or "",
            "title": message.title,
            "message": message.message,
            "priority": str(message.priority),
        }
        if message.priority == _EMERGENCY_PRIORITY:
            form["retry"] = str(self._retry_seconds)
            form["expire"] = str(self._expire_seconds)
        if self._sound:
            form["sound"] = self._sound
        if message.url:
            form["url"] = message.url
            if message.url_title:
                form["url_title"] = message.url_title
        return form

    async def close(self) -> None:
        await self._http_client.aclose()


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
