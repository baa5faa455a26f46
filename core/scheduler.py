from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from dataclasses import replace

from core.detector import combine_changes, detect_changes
from core.memory_guard import MemoryGuard
from core.state_store import StateStore
from models.config import StreamerConfig
from models.event import ChangeEvent, ChangeKind
from models.state import StreamerState, login_key
from models.twitch import Channel, Stream, User
from providers.base import StreamPlatform
from providers.errors import TwitchError
from sinks.dispatcher import DispatchReport, NotificationDispatcher
from sinks.embed import sized_thumbnail

log = logging.getLogger(__name__)

# EX_TEMPFAIL: tells the process supervisor the exit is a planned restart.
RESTART_EXIT_CODE = 75


def build_streamer_state(
    user: User, stream: Stream | None, channel: Channel | None
) -> StreamerState:
    """Snapshot from the user record plus either the live stream or the channel."""
    base = dict(
        user_id=user.id,
        login=login_key(user.login),
        display_name=user.display_name,
        profile_image_url=user.profile_image_url,
    )
    if stream is not None:
        return StreamerState(
            **base,
            is_live=True,
            title=stream.title,
            game_id=stream.game_id,
            game_name=stream.game_name,
            started_at=stream.started_at or None,
            thumbnail_url=stream.thumbnail_url or None,
            viewer_count=stream.viewer_count,
        )
    if channel is not None:
        return StreamerState(
            **base,
            title=channel.title,
            game_id=channel.game_id,
            game_name=channel.game_name,
        )
    return StreamerState(**base)


class Scheduler:
    """Drives the poll cycle for every configured streamer.

    Startup resolves logins to users once; that lookup failing is fatal.
    After that one cycle runs immediately and further cycles run every
    ``interval_seconds`` until ``stop()`` is called.  Each cycle:

    1. fetch live streams for all tracked logins (one batched request)
    2. fetch channel metadata for the offline ones (one batched request)
    3. build new snapshots and diff them against the stored ones
    4. merge title and game changes, attach VOD info to offline events
    5. dispatch every event concurrently and wait for all deliveries
    6. store the new snapshots

    A failed fetch in steps 1-2 abandons the cycle without touching the
    store, so the next tick retries from the last good snapshots.
    """

    def __init__(
        self,
        platform: StreamPlatform,
        streamers: Sequence[StreamerConfig],
        store: StateStore,
        dispatcher: NotificationDispatcher,
        interval_seconds: float,
        memory_guard: MemoryGuard | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._platform = platform
        self._streamers = list(streamers)
        self._logins = list(dict.fromkeys(s.key for s in self._streamers))
        self._store = store
        self._dispatcher = dispatcher
        self._interval = interval_seconds
        self._memory_guard = memory_guard
        self._log = logger or log
        self._users: dict[str, User] = {}
        self._stopping = asyncio.Event()
        self.cycles = 0
        self.exit_code = 0

    def stop(self) -> None:
        """Stop arming new cycles.  A cycle already running is allowed to finish."""
        self._stopping.set()

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    async def initialize(self) -> None:
        self._users = await self._platform.get_users(self._logins)
        for streamer in self._streamers:
            if streamer.key not in self._users:
                self._log.warning("User not found: %s", streamer.username)

    async def run(self) -> int:
        """Initialize, then poll until stopped.  Returns the process exit code."""
        await self.initialize()
        self._log.info(
            "Polling started (interval=%ss, streamers=%d)",
            self._interval,
            len(self._streamers),
        )

        loop = asyncio.get_running_loop()
        started = loop.time()
        await self._guarded_cycle()
        while not self._stopping.is_set():
            # Fixed rate: the next tick is due one interval after the last
            # cycle started, however long that cycle took.
            delay = max(0.0, started + self._interval - loop.time())
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=delay)
            except asyncio.TimeoutError:
                started = loop.time()
                await self._guarded_cycle()

        self._log.info("Polling stopped")
        return self.exit_code

    async def _guarded_cycle(self) -> None:
        try:
            await self.run_cycle()
        except Exception:
            self._log.exception("Poll cycle crashed")

    async def run_cycle(self) -> bool:
        """Run one cycle.  Returns False when a fetch failed and nothing was stored."""
        try:
            streams = await self._platform.get_streams(self._logins)
            offline_ids = [
                self._users[key].id
                for key in self._logins
                if key in self._users and key not in streams
            ]
            channels = await self._platform.get_channels(offline_ids)
        except TwitchError as exc:
            self._log.error("Polling failed: %s", exc)
            return False

        updates: list[tuple[str, StreamerState]] = []
        deliveries: list[Awaitable[DispatchReport]] = []
        for streamer in self._streamers:
            processed = await self._process_streamer(streamer, streams, channels)
            if processed is None:
                continue
            state, events = processed
            updates.append((streamer.key, state))
            deliveries.extend(
                self._dispatcher.dispatch(event, streamer.webhooks) for event in events
            )

        if deliveries:
            results = await asyncio.gather(*deliveries, return_exceptions=True)
            for result in results:
                if isinstance(result, BaseException):
                    self._log.error("Dispatch failed: %r", result)

        for key, state in updates:
            self._store.update(key, state)

        self.cycles += 1
        self._check_memory()
        return True

    async def _process_streamer(
        self,
        streamer: StreamerConfig,
        streams: dict[str, Stream],
        channels: dict[str, Channel],
    ) -> tuple[StreamerState, list[ChangeEvent]] | None:
        key = streamer.key
        user = self._users.get(key)
        if user is None:
            return None

        new_state = build_streamer_state(user, streams.get(key), channels.get(key))
        old_state = self._store.get(key)
        events = detect_changes(old_state, new_state)

        if old_state is None:
            if new_state.is_live:
                status = f"live - {new_state.game_name or 'no game set'}"
                # Already live at the first poll is reported as a fresh start.
                events.append(
                    ChangeEvent(kind=ChangeKind.ONLINE, streamer=key, state=new_state)
                )
            else:
                status = "offline"
            self._log.info("Initial state: %s (%s)", new_state.display_name, status)

        events = combine_changes(events)
        return new_state, [
            await self._attach_vod(event, user.id)
            if event.kind is ChangeKind.OFFLINE
            else event
            for event in events
        ]

    async def _attach_vod(self, event: ChangeEvent, user_id: str) -> ChangeEvent:
        try:
            vod = await self._platform.get_latest_vod(user_id)
        except TwitchError as exc:
            self._log.warning("VOD lookup failed for %s: %s", event.streamer, exc)
            return event
        if vod is None:
            return event
        return replace(
            event,
            vod_url=vod.url,
            vod_thumbnail_url=sized_thumbnail(vod.thumbnail_url) or None,
        )

    def _check_memory(self) -> None:
        guard = self._memory_guard
        if guard is None:
            return
        guard.tick()
        if guard.restart_requested and self._store.all_offline(self._users):
            self._log.warning("Every streamer is offline; restarting to release memory")
            self.exit_code = RESTART_EXIT_CODE
            self.stop()
