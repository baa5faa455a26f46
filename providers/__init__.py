from providers.auth import CredentialBroker
from providers.base import StreamPlatform
from providers.errors import APIError, AuthError, TwitchError
from providers.twitch_provider import TwitchProvider

__all__ = [
    "APIError",
    "AuthError",
    "CredentialBroker",
    "StreamPlatform",
    "TwitchError",
    "TwitchProvider",
]
