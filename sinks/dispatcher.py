from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import timezone, tzinfo

import httpx

from models.config import WebhookConfig
from models.event import ChangeEvent
from sinks.base import NotificationSink
from sinks.discord import DiscordWebhookSink
from sinks.embed import build_embed, build_payload

log = logging.getLogger(__name__)

SinkFactory = Callable[[WebhookConfig], NotificationSink]


@dataclass(frozen=True)
class DispatchReport:
    sent: int = 0
    failed: int = 0


class NotificationDispatcher:
    """Fans one change event out to a broadcaster's webhooks.

    The payload is built once per event.  Every webhook whose interest
    flags accept the event kind gets its own concurrent delivery; a
    failure is logged with the webhook's position and never affects the
    others.  ``dispatch()`` returns only after every delivery has settled.
    """

    def __init__(
        self,
        sink_factory: SinkFactory,
        tz: tzinfo = timezone.utc,
        logger: logging.Logger | None = None,
    ) -> None:
        self._sink_factory = sink_factory
        self._tz = tz
        self._log = logger or log

    @classmethod
    def for_discord(
        cls,
        client: httpx.AsyncClient,
        tz: tzinfo = timezone.utc,
        logger: logging.Logger | None = None,
    ) -> NotificationDispatcher:
        """Dispatcher whose sinks are Discord webhooks sharing *client*."""
        return cls(
            lambda webhook: DiscordWebhookSink(client, webhook.url, webhook.name),
            tz=tz,
            logger=logger,
        )

    async def dispatch(
        self, event: ChangeEvent, webhooks: Sequence[WebhookConfig]
    ) -> DispatchReport:
        total = len(webhooks)
        targets = [
            (position, webhook)
            for position, webhook in enumerate(webhooks, start=1)
            if webhook.notifications.accepts(event.kind)
        ]
        if not targets:
            return DispatchReport()

        payload = build_payload(event, build_embed(event, tz=self._tz))
        sinks = [self._sink_factory(webhook) for _, webhook in targets]

        for sink in sinks:
            message = "[%s] %s → %s"
            args: tuple[str, ...] = (event.state.display_name, event.kind.value, sink.label)
            if event.new_value:
                message += " (%s)"
                args += (event.new_value,)
            self._log.info(message, *args)

        results = await asyncio.gather(
            *(sink.send(payload) for sink in sinks),
            return_exceptions=True,
        )

        failed = 0
        for (position, _), sink, result in zip(targets, sinks, results):
            if isinstance(result, BaseException):
                failed += 1
                self._log.error(
                    "Webhook delivery failed (%d/%d, %s): %s",
                    position,
                    total,
                    sink.label,
                    result,
                )
        return DispatchReport(sent=len(sinks) - failed, failed=failed)
