from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StreamerState:
    """Snapshot of one tracked broadcaster at one poll.

    Fields:
        user_id:           Stable Twitch user id.
        login:             Login folded by login_key, also the store key.
        display_name:      Name shown to viewers.
        profile_image_url: Avatar URL.
        is_live:           Whether a stream was returned for this poll.
        title:             Stream title, or the channel title while offline.
        game_id:           Category id; empty string means no category.
        game_name:         Category name.
        started_at:        ISO 8601 start of the current stream (live only).
        thumbnail_url:     Preview template with {width}/{height} (live only).
        viewer_count:      Viewers at poll time, 0 while offline.
    """

    user_id: str
    login: str
    display_name: str
    profile_image_url: str = ""
    is_live: bool = False
    title: str = ""
    game_id: str = ""
    game_name: str = ""
    started_at: str | None = None
    thumbnail_url: str | None = None
    viewer_count: int = 0


def login_key(login: str) -> str:
    """Canonical form of a Twitch login, used for every lookup key."""
    return login.casefold()
