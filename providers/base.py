from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

import httpx

from models.twitch import Channel, Stream, User, Video


class StreamPlatform(ABC):
    """Abstract base for the live-streaming platform the notifier polls.

    Implementations perform batched lookups: every identifier passed to a
    call goes into a single request, and results are keyed by the
    broadcaster's lowercase login.  An empty input returns an empty mapping
    without touching the network.

    A shared ``httpx.AsyncClient`` is injected at construction time so
    that every call reuses one connection pool.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable platform name (e.g. 'Twitch')."""

    @abstractmethod
    async def get_users(self, logins: Iterable[str]) -> dict[str, User]:
        """Resolve logins to user records."""

    @abstractmethod
    async def get_streams(self, logins: Iterable[str]) -> dict[str, Stream]:
        """Return the streams that are currently live among *logins*."""

    @abstractmethod
    async def get_channels(self, broadcaster_ids: Iterable[str]) -> dict[str, Channel]:
        """Return channel metadata (title, game) for the given user ids."""

    @abstractmethod
    async def get_latest_vod(self, user_id: str) -> Video | None:
        """Return the most recent archived broadcast, or None if there is none."""
