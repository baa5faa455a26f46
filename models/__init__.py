from models.config import AppConfig, ConfigError, StreamerConfig, WebhookConfig, load_config
from models.event import ChangeEvent, ChangeKind
from models.state import StreamerState
from models.twitch import Channel, Stream, User, Video

__all__ = [
    "AppConfig",
    "ChangeEvent",
    "ChangeKind",
    "Channel",
    "ConfigError",
    "Stream",
    "StreamerConfig",
    "StreamerState",
    "User",
    "Video",
    "WebhookConfig",
    "load_config",
]
