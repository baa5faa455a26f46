"""Configuration schema for the notifier.

The file is JSON with camelCase keys and is validated once at startup.
Everything downstream receives already-validated, immutable models.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from models.event import ChangeKind
from models.state import login_key

WEBHOOK_URL_PREFIX = "https://discord.com/api/webhooks/"
MIN_POLL_INTERVAL_SECONDS = 10
DEFAULT_CONFIG_PATH = "config.json"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class NotificationSettings(_Model):
    """Per-webhook interest flags, one per notification kind."""

    online: bool = True
    offline: bool = True
    title_change: bool = True
    game_change: bool = True

    def accepts(self, kind: ChangeKind) -> bool:
        if kind is ChangeKind.ONLINE:
            return self.online
        if kind is ChangeKind.OFFLINE:
            return self.offline
        if kind is ChangeKind.TITLE_CHANGE:
            return self.title_change
        if kind is ChangeKind.GAME_CHANGE:
            return self.game_change
        if kind is ChangeKind.TITLE_AND_GAME_CHANGE:
            return self.title_change or self.game_change
        raise ValueError(f"Unknown change kind: {kind!r}")


class WebhookConfig(_Model):
    url: str
    name: str | None = None
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(WEBHOOK_URL_PREFIX):
            raise ValueError(f"must start with {WEBHOOK_URL_PREFIX}")
        return value

    @property
    def label(self) -> str:
        return self.name or "Webhook"


class StreamerConfig(_Model):
    username: str = Field(min_length=1)
    webhooks: list[WebhookConfig] = Field(min_length=1)

    @property
    def key(self) -> str:
        return login_key(self.username)


class TwitchConfig(_Model):
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)


class PollingConfig(_Model):
    interval_seconds: int = Field(default=60, ge=MIN_POLL_INTERVAL_SECONDS)


class LogConfig(_Model):
    level: Literal["debug", "info", "warn", "error"] = "info"


class MemoryGuardConfig(_Model):
    """Restart-on-high-memory settings. Off unless enabled explicitly."""

    enabled: bool = False
    threshold_mb: int = Field(default=512, gt=0)
    check_every_cycles: int = Field(default=10, ge=1)


class AppConfig(_Model):
    twitch: TwitchConfig
    polling: PollingConfig = Field(default_factory=PollingConfig)
    streamers: list[StreamerConfig] = Field(min_length=1)
    log: LogConfig = Field(default_factory=LogConfig)
    timezone: str = "UTC"
    memory_guard: MemoryGuardConfig = Field(default_factory=MemoryGuardConfig)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Read and validate the JSON configuration file at *path*."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}:\n{exc}") from exc
