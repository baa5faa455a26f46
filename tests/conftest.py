"""Shared fixtures for the notifier test suite."""
from __future__ import annotations

from typing import Any

import pytest

from models.config import NotificationSettings, StreamerConfig, WebhookConfig
from models.state import StreamerState
from models.twitch import User

WEBHOOK_BASE = "https://discord.com/api/webhooks/"


def _make_state(**overrides: Any) -> StreamerState:
    values: dict[str, Any] = dict(
        user_id="1001",
        login="foo",
        display_name="Foo",
        profile_image_url="https://img.example/foo.png",
        is_live=False,
        title="Hello",
        game_id="509658",
        game_name="Just Chatting",
    )
    values.update(overrides)
    return StreamerState(**values)


def _make_webhook(
    name: str,
    online: bool = True,
    offline: bool = True,
    title_change: bool = True,
    game_change: bool = True,
) -> WebhookConfig:
    return WebhookConfig(
        url=f"{WEBHOOK_BASE}{name}/token",
        name=name,
        notifications=NotificationSettings(
            online=online,
            offline=offline,
            title_change=title_change,
            game_change=game_change,
        ),
    )


@pytest.fixture
def make_state():
    """Factory for ``StreamerState`` with overridable defaults."""
    return _make_state


@pytest.fixture
def make_webhook():
    """Factory for ``WebhookConfig`` pointing at a fake Discord URL."""
    return _make_webhook


@pytest.fixture
def user_foo() -> User:
    return User(
        id="1001",
        login="foo",
        display_name="Foo",
        profile_image_url="https://img.example/foo.png",
    )


@pytest.fixture
def streamer_foo() -> StreamerConfig:
    return StreamerConfig(username="Foo", webhooks=[_make_webhook("main")])
