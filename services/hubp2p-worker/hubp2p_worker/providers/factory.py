from __future__ import annotations

import httpx

from hubp2p_worker.core.config import Settings
from hubp2p_worker.providers.pushover import PushoverClient


class PushoverClientFactory:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def create(self) -> PushoverClient:
        client = httpx.AsyncClient(
            base_url=self._settings.pushover_base_url,
            timeout=self._settings.pushover_timeout_seconds,
        )
        return PushoverClient(
            client,
            messages_path=self._settings.pushover_messages_path,
            token=self._settings.pushover_token,
            user_key=self._settings.pushover_user_key,
            retry_seconds=self._settings.pushover_retry_seconds,
            expire_seconds=self._settings.pushover_expire_seconds,
            sound=self._settings.pushover_sound,
        )
