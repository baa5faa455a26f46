from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from models.state import StreamerState


class ChangeKind(str, Enum):
    """Discriminant of a ``ChangeEvent``.

    Values match the notification keys used in the configuration file.
    """

    ONLINE = "online"
    OFFLINE = "offline"
    TITLE_CHANGE = "titleChange"
    GAME_CHANGE = "gameChange"
    TITLE_AND_GAME_CHANGE = "titleAndGameChange"


@dataclass(frozen=True)
class ChangeEvent:
    """One transition detected between two snapshots of a broadcaster.

    Fields:
        kind:              Which transition happened.
        streamer:          Lowercase login of the owning broadcaster.
        state:             Snapshot that triggered the event.
        old_value:         Previous title or game name (single-field changes).
        new_value:         New title or game name (single-field changes).
        old_title:         Previous title (merged title and game change).
        new_title:         New title (merged title and game change).
        old_game:          Previous game name (merged title and game change).
        new_game:          New game name (merged title and game change).
        stream_started_at: Start of the stream that just ended (offline).
        vod_url:           Archive of the stream that just ended (offline).
        vod_thumbnail_url: Sized thumbnail of that archive (offline).
    """

    kind: ChangeKind
    streamer: str
    state: StreamerState
    old_value: str = ""
    new_value: str = ""
    old_title: str = ""
    new_title: str = ""
    old_game: str = ""
    new_game: str = ""
    stream_started_at: str | None = None
    vod_url: str | None = None
    vod_thumbnail_url: str | None = None
