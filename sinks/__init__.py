from sinks.base import NotificationSink
from sinks.discord import DiscordWebhookSink, WebhookError
from sinks.dispatcher import DispatchReport, NotificationDispatcher
from sinks.embed import Embed, EmbedField, build_embed, build_payload

__all__ = [
    "DiscordWebhookSink",
    "DispatchReport",
    "Embed",
    "EmbedField",
    "NotificationDispatcher",
    "NotificationSink",
    "WebhookError",
    "build_embed",
    "build_payload",
]
