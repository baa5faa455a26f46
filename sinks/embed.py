"""Discord embed construction for change events.

One embed is built per event and shared by every webhook that receives it.
Colors and titles are fixed per ``ChangeKind``; the merged title-and-game
change has its own color distinct from either half.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Any

from models.event import ChangeEvent, ChangeKind

THUMBNAIL_WIDTH = "440"
THUMBNAIL_HEIGHT = "248"
CHANNEL_URL = "https://twitch.tv/{login}"

COLORS: dict[ChangeKind, int] = {
    ChangeKind.ONLINE: 0x9146FF,
    ChangeKind.OFFLINE: 0x808080,
    ChangeKind.TITLE_CHANGE: 0x00FF00,
    ChangeKind.GAME_CHANGE: 0xFF9900,
    ChangeKind.TITLE_AND_GAME_CHANGE: 0x00CCFF,
}

TITLES: dict[ChangeKind, str] = {
    ChangeKind.ONLINE: "Stream started",
    ChangeKind.OFFLINE: "Stream ended",
    ChangeKind.TITLE_CHANGE: "Title changed",
    ChangeKind.GAME_CHANGE: "Game changed",
    ChangeKind.TITLE_AND_GAME_CHANGE: "Title and game changed",
}

_METADATA_KINDS = frozenset({
    ChangeKind.TITLE_CHANGE,
    ChangeKind.GAME_CHANGE,
    ChangeKind.TITLE_AND_GAME_CHANGE,
})

NO_TITLE = "(none)"
NO_GAME = "(not set)"


@dataclass
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass
class Embed:
    title: str
    color: int
    description: str | None = None
    url: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    fields: list[EmbedField] = field(default_factory=list)
    timestamp: str | None = None
    footer: str | None = None
    author_name: str | None = None
    author_icon_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Webhook JSON representation; unset optionals are omitted."""
        data: dict[str, Any] = {"title": self.title, "color": self.color}
        if self.description:
            data["description"] = self.description
        if self.url:
            data["url"] = self.url
        if self.image_url:
            data["image"] = {"url": self.image_url}
        if self.thumbnail_url:
            data["thumbnail"] = {"url": self.thumbnail_url}
        if self.fields:
            data["fields"] = [
                {"name": f.name, "value": f.value, "inline": f.inline}
                for f in self.fields
            ]
        if self.timestamp:
            data["timestamp"] = self.timestamp
        if self.footer:
            data["footer"] = {"text": self.footer}
        if self.author_name:
            data["author"] = {"name": self.author_name}
            if self.author_icon_url:
                data["author"]["icon_url"] = self.author_icon_url
        return data


def _parse_timestamp(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).astimezone(timezone.utc)
    except ValueError:
        return None


def _hours_minutes(start: datetime, now: datetime) -> tuple[int, int]:
    total_minutes = int((now - start).total_seconds() // 60)
    return divmod(total_minutes, 60)


def format_elapsed(started_at: str | None, now: datetime) -> str:
    """Footer text such as 'Live for 1h 5m'.

    Empty when the start is unknown or in the future, and 'just now'
    under one minute.
    """
    start = _parse_timestamp(started_at)
    if start is None or now < start:
        return ""
    hours, mins = _hours_minutes(start, now)
    if hours == 0 and mins < 1:
        return "just now"
    if hours == 0:
        return f"Live for {mins}m"
    return f"Live for {hours}h {mins}m"


def format_duration(start: datetime, now: datetime) -> str:
    hours, mins = _hours_minutes(start, now)
    if hours == 0:
        return f"{mins}m"
    return f"{hours}h {mins}m"


def format_clock(moment: datetime, tz: tzinfo) -> str:
    return moment.astimezone(tz).strftime("%H:%M")


def sized_thumbnail(template: str) -> str:
    """Fill the width/height placeholders of a Twitch thumbnail template.

    Live previews use ``{width}``; VOD thumbnails use ``%{width}``.
    """
    for marker in ("%{width}", "{width}"):
        template = template.replace(marker, THUMBNAIL_WIDTH)
    for marker in ("%{height}", "{height}"):
        template = template.replace(marker, THUMBNAIL_HEIGHT)
    return template


def _or_default(value: str, default: str) -> str:
    return value or default


def build_embed(
    event: ChangeEvent,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
) -> Embed:
    """Render *event* as an embed.

    *now* defaults to the current UTC time and *tz* controls how
    wall-clock times are shown in fields.
    """
    now = now or datetime.now(timezone.utc)
    state = event.state
    kind = event.kind

    embed = Embed(
        title=TITLES[kind],
        color=COLORS[kind],
        url=CHANNEL_URL.format(login=state.login),
        timestamp=now.isoformat(),
        author_name=state.display_name,
        author_icon_url=state.profile_image_url or None,
    )

    if kind is ChangeKind.ONLINE:
        embed.description = _or_default(state.title, "(no title)")
        embed.fields.append(
            EmbedField("Game", _or_default(state.game_name, NO_GAME), inline=True)
        )
        start = _parse_timestamp(state.started_at)
        if start is not None:
            embed.fields.append(EmbedField("Started", format_clock(start, tz), inline=True))
            elapsed = format_elapsed(state.started_at, now)
            if elapsed and elapsed != "just now":
                embed.footer = elapsed
        if state.thumbnail_url:
            embed.image_url = sized_thumbnail(state.thumbnail_url)

    elif kind is ChangeKind.OFFLINE:
        embed.description = "The stream has ended"
        start = _parse_timestamp(event.stream_started_at)
        if start is not None:
            embed.fields.append(EmbedField(
                "Stream time",
                f"{format_clock(start, tz)} → {format_clock(now, tz)} "
                f"({format_duration(start, now)})",
            ))
        else:
            embed.fields.append(EmbedField("Ended", format_clock(now, tz), inline=True))
        if event.vod_url:
            embed.fields.append(EmbedField("VOD", f"[Watch this stream]({event.vod_url})"))
        if event.vod_thumbnail_url:
            embed.image_url = event.vod_thumbnail_url

    elif kind is ChangeKind.TITLE_CHANGE:
        embed.fields = [
            EmbedField("Before", _or_default(event.old_value, NO_TITLE)),
            EmbedField("After", _or_default(event.new_value, NO_TITLE)),
        ]

    elif kind is ChangeKind.GAME_CHANGE:
        embed.fields = [
            EmbedField("Before", _or_default(event.old_value, NO_GAME), inline=True),
            EmbedField("After", _or_default(event.new_value, NO_GAME), inline=True),
        ]

    elif kind is ChangeKind.TITLE_AND_GAME_CHANGE:
        embed.fields = [
            EmbedField(
                "Title",
                f"{_or_default(event.old_title, NO_TITLE)}\n→ {_or_default(event.new_title, NO_TITLE)}",
            ),
            EmbedField(
                "Game",
                f"{_or_default(event.old_game, NO_GAME)}\n→ {_or_default(event.new_game, NO_GAME)}",
            ),
        ]

    else:
        raise ValueError(f"Unknown change kind: {kind!r}")

    if kind in _METADATA_KINDS and state.is_live and embed.footer is None:
        embed.footer = "Live"

    return embed


def build_payload(event: ChangeEvent, embed: Embed) -> dict[str, Any]:
    """Webhook body posting *embed* under the broadcaster's name and avatar."""
    payload: dict[str, Any] = {"embeds": [embed.to_dict()]}
    if event.state.display_name:
        payload["username"] = event.state.display_name
    if event.state.profile_image_url:
        payload["avatar_url"] = event.state.profile_image_url
    return payload
