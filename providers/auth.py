from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from providers.errors import AuthError

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
TOKEN_TIMEOUT_SECONDS = 15.0
EXPIRY_MARGIN_SECONDS = 60.0

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    access_token: str
    expires_at: float

    def is_usable(self, now: float) -> bool:
        """True until one safety margin before the recorded expiry."""
        return now < self.expires_at - EXPIRY_MARGIN_SECONDS


class CredentialBroker:
    """Client-credentials token cache for the Helix API.

    The token is fetched lazily on first use and replaced wholesale when it
    gets within ``EXPIRY_MARGIN_SECONDS`` of expiring.  An ``asyncio.Lock``
    serializes access, so callers that arrive while a refresh is running
    wait for it and then reuse its result instead of starting their own.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._client_id = client_id
        self._client_secret = client_secret
        self._clock = clock
        self._log = logger or log
        self._credential: Credential | None = None
        self._lock = asyncio.Lock()

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def credential(self) -> Credential | None:
        return self._credential

    async def get_token(self) -> str:
        async with self._lock:
            cached = self._credential
            if cached is not None and cached.is_usable(self._clock()):
                return cached.access_token
            self._credential = await self._refresh()
            return self._credential.access_token

    async def _refresh(self) -> Credential:
        self._log.debug("Requesting Twitch app access token")
        form = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "client_credentials",
        }

        try:
            resp = await self._client.post(
                TOKEN_URL, data=form, timeout=TOKEN_TIMEOUT_SECONDS
            )
        except httpx.HTTPError as exc:
            raise AuthError(f"Token request failed: {exc!r}") from exc

        if resp.status_code != 200:
            raise AuthError(
                f"Twitch authentication failed: {resp.status_code} {resp.text}"
            )

        try:
            payload = resp.json()
            credential = Credential(
                access_token=payload["access_token"],
                expires_at=self._clock() + float(payload["expires_in"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise AuthError(f"Malformed token response: {resp.text}") from exc

        self._log.debug("Twitch app access token acquired")
        return credential
