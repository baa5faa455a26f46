from __future__ import annotations

import logging
from typing import Any

import httpx

from sinks.base import NotificationSink

WEBHOOK_TIMEOUT_SECONDS = 30.0

log = logging.getLogger(__name__)


class WebhookError(Exception):
    """A webhook POST failed or was rejected."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _truncate(text: str, max_len: int = 50) -> str:
    return text if len(text) <= max_len else text[:max_len] + "..."


class DiscordWebhookSink(NotificationSink):
    """Posts JSON payloads to a Discord webhook URL."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        name: str | None = None,
        timeout: float = WEBHOOK_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._url = url
        self._name = name
        self._timeout = timeout

    @property
    def label(self) -> str:
        return self._name or "Webhook"

    async def send(self, payload: dict[str, Any]) -> None:
        try:
            resp = await self._client.post(self._url, json=payload, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise WebhookError(f"Webhook request to {self.label} failed: {exc!r}") from exc

        if not resp.is_success:
            raise WebhookError(
                f"Webhook {self.label} rejected payload: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        log.debug("Webhook delivered to %s", _truncate(self._url))
