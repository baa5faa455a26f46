"""Stream Notifier -- entry point.

Assembles the polling pipeline:

    Scheduler (one asyncio task, fixed interval)
        -> TwitchProvider (batched Helix lookups, CredentialBroker tokens)
        -> detect_changes / combine_changes against the StateStore
        -> NotificationDispatcher (concurrent Discord webhook fan-out)

A shared httpx.AsyncClient is injected into every component that talks
HTTP.  SIGINT/SIGTERM stop the scheduler after the running cycle.
"""
from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

import httpx

from core.memory_guard import MemoryGuard
from core.scheduler import Scheduler
from core.state_store import StateStore
from models.config import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from providers.auth import CredentialBroker
from providers.errors import TwitchError
from providers.twitch_provider import TwitchProvider
from sinks.dispatcher import NotificationDispatcher

CONFIG_ENV_VAR = "STREAM_NOTIFIER_CONFIG"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

log = logging.getLogger("stream_notifier")


def configure_logging(level: str = "info") -> None:
    logging.basicConfig(
        level=LOG_LEVELS.get(level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    # httpx logs every request at INFO, which would drown the poll output.
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run(config: AppConfig) -> int:
    async with httpx.AsyncClient(timeout=30.0) as client:
        broker = CredentialBroker(
            client,
            config.twitch.client_id,
            config.twitch.client_secret,
        )
        platform = TwitchProvider(client, broker)
        dispatcher = NotificationDispatcher.for_discord(client, tz=config.tzinfo)

        guard = None
        if config.memory_guard.enabled:
            guard = MemoryGuard(
                threshold_mb=config.memory_guard.threshold_mb,
                check_every_cycles=config.memory_guard.check_every_cycles,
            )

        scheduler = Scheduler(
            platform=platform,
            streamers=config.streamers,
            store=StateStore(),
            dispatcher=dispatcher,
            interval_seconds=config.polling.interval_seconds,
            memory_guard=guard,
        )

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, scheduler.stop)
            except NotImplementedError:
                # Windows event loops have no signal handlers; Ctrl+C still
                # raises KeyboardInterrupt in main().
                pass

        return await scheduler.run()


def main() -> None:
    configure_logging()
    log.info("Stream Notifier starting")

    path = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    try:
        config = load_config(path)
    except ConfigError as exc:
        log.error("%s", exc)
        sys.exit(1)

    configure_logging(config.log.level)

    try:
        exit_code = asyncio.run(run(config))
    except TwitchError as exc:
        log.error("Startup failed: %s", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nShutting down.")
        exit_code = 0

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
