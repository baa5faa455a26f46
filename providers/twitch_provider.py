from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import httpx

from models.state import login_key
from models.twitch import Channel, Stream, User, Video
from providers.auth import CredentialBroker
from providers.base import StreamPlatform
from providers.errors import APIError

HELIX_BASE_URL = "https://api.twitch.tv/helix"
REQUEST_TIMEOUT_SECONDS = 15.0

T = TypeVar("T")

log = logging.getLogger(__name__)


class TwitchProvider(StreamPlatform):
    """Helix REST adapter.

    Every request asks the ``CredentialBroker`` for a bearer token first;
    an ``AuthError`` from the broker propagates unchanged.  Non-2xx
    responses raise ``APIError`` with the response body attached.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        broker: CredentialBroker,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(client)
        self._broker = broker
        self._log = logger or log

    @property
    def name(self) -> str:
        return "Twitch"

    async def _request(
        self,
        endpoint: str,
        params: list[tuple[str, str]],
        parse: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        """GET *endpoint* and parse every item of the ``data`` envelope.

        Malformed envelopes and records raise ``APIError`` with the body
        attached, like any other failed call.
        """
        token = await self._broker.get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Client-Id": self._broker.client_id,
        }

        try:
            resp = await self._client.get(
                f"{HELIX_BASE_URL}{endpoint}",
                params=params,
                headers=headers,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as exc:
            raise APIError(f"GET {endpoint} failed: {exc!r}") from exc

        if not resp.is_success:
            raise APIError(
                f"Twitch API error on {endpoint}: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            )

        try:
            return [parse(item) for item in resp.json()["data"]]
        except (ValueError, KeyError, TypeError) as exc:
            raise APIError(
                f"Unreadable response from {endpoint} ({exc!r}): {resp.text}",
                status_code=resp.status_code,
                body=resp.text,
            ) from exc

    async def get_users(self, logins: Iterable[str]) -> dict[str, User]:
        params = [("login", login) for login in logins]
        if not params:
            return {}

        users = await self._request("/users", params, User.from_api)
        self._log.debug("Fetched %d user(s)", len(users))
        return {login_key(u.login): u for u in users}

    async def get_streams(self, logins: Iterable[str]) -> dict[str, Stream]:
        params = [("user_login", login) for login in logins]
        if not params:
            return {}

        streams = await self._request("/streams", params, Stream.from_api)
        self._log.debug("%d stream(s) live", len(streams))
        return {login_key(s.user_login): s for s in streams}

    async def get_channels(self, broadcaster_ids: Iterable[str]) -> dict[str, Channel]:
        params = [("broadcaster_id", bid) for bid in broadcaster_ids]
        if not params:
            return {}

        channels = await self._request("/channels", params, Channel.from_api)
        self._log.debug("Fetched %d channel(s)", len(channels))
        return {login_key(c.broadcaster_login): c for c in channels}

    async def get_latest_vod(self, user_id: str) -> Video | None:
        params = [("user_id", user_id), ("type", "archive"), ("first", "1")]
        videos = await self._request("/videos", params, Video.from_api)
        return videos[0] if videos else None
