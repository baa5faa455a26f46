from __future__ import annotations


class TwitchError(Exception):
    """Base class for failures talking to Twitch."""


class AuthError(TwitchError):
    """An app access token could not be obtained."""


class APIError(TwitchError):
    """A Helix request failed or returned a non-success status.

    ``status_code`` is ``None`` for transport errors and unreadable bodies.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
