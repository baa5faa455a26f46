"""Records returned by the Twitch Helix endpoints the notifier reads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class User:
    id: str
    login: str
    display_name: str
    profile_image_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> User:
        return cls(
            id=data["id"],
            login=data["login"],
            display_name=data.get("display_name") or data["login"],
            profile_image_url=data.get("profile_image_url", ""),
        )


@dataclass(frozen=True)
class Stream:
    """A live stream from ``GET /streams``."""

    id: str
    user_id: str
    user_login: str
    user_name: str
    game_id: str
    game_name: str
    title: str
    viewer_count: int
    started_at: str
    thumbnail_url: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Stream:
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            user_login=data["user_login"],
            user_name=data.get("user_name", ""),
            game_id=data.get("game_id", ""),
            game_name=data.get("game_name", ""),
            title=data.get("title", ""),
            viewer_count=int(data.get("viewer_count", 0)),
            started_at=data.get("started_at", ""),
            thumbnail_url=data.get("thumbnail_url", ""),
        )


@dataclass(frozen=True)
class Channel:
    """Channel metadata from ``GET /channels``.

    Used for offline broadcasters, whose title and game are not part of
    the streams response.
    """

    broadcaster_id: str
    broadcaster_login: str
    broadcaster_name: str
    game_id: str
    game_name: str
    title: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Channel:
        return cls(
            broadcaster_id=data["broadcaster_id"],
            broadcaster_login=data["broadcaster_login"],
            broadcaster_name=data.get("broadcaster_name", ""),
            game_id=data.get("game_id", ""),
            game_name=data.get("game_name", ""),
            title=data.get("title", ""),
        )


@dataclass(frozen=True)
class Video:
    """An archived broadcast (VOD) from ``GET /videos``."""

    id: str
    user_id: str
    url: str
    title: str = ""
    created_at: str = ""
    duration: str = ""
    thumbnail_url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Video:
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            url=data["url"],
            title=data.get("title", ""),
            created_at=data.get("created_at", ""),
            duration=data.get("duration", ""),
            thumbnail_url=data.get("thumbnail_url", ""),
        )
