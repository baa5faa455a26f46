from __future__ import annotations

import logging

import psutil

log = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class MemoryGuard:
    """Samples resident memory every few poll cycles.

    Once RSS exceeds ``threshold_mb`` the guard latches
    ``restart_requested``.  It never exits the process itself; the
    scheduler decides when a restart is safe.
    """

    def __init__(
        self,
        threshold_mb: int,
        check_every_cycles: int = 10,
        process: psutil.Process | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._threshold_mb = threshold_mb
        self._check_every = max(1, check_every_cycles)
        self._process = process or psutil.Process()
        self._log = logger or log
        self._cycles = 0
        self.restart_requested = False
        self.last_rss_mb: float | None = None

    def tick(self) -> None:
        """Record one finished cycle and sample memory when due."""
        self._cycles += 1
        if self.restart_requested or self._cycles % self._check_every:
            return

        try:
            rss_mb = self._process.memory_info().rss / BYTES_PER_MB
        except psutil.Error as exc:
            self._log.warning("Memory sample failed: %s", exc)
            return

        self.last_rss_mb = rss_mb
        self._log.debug("RSS %.1f MB after %d cycle(s)", rss_mb, self._cycles)

        if rss_mb > self._threshold_mb:
            self.restart_requested = True
            self._log.warning(
                "RSS %.1f MB exceeds %d MB; restart once every streamer is offline",
                rss_mb,
                self._threshold_mb,
            )
