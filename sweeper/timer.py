from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .config import MAX_TIME

logger = logging.getLogger(__name__)


class SessionTimer:
    """Whole-second game clock.

    Counts only while ``active`` (game in progress and host in the
    foreground). Every start or stop bumps ``generation``; a tick carrying an
    older generation is stale and ignored, so a pending callback from a
    previous run or a previous game can never count.

    Inside a running asyncio loop the timer schedules its own ticks with
    ``call_later``. Without one, the host drives it by calling ``tick()``.
    """

    def __init__(
        self,
        max_seconds: int = MAX_TIME,
        interval: float = 1.0,
        on_expire: Optional[Callable[[], None]] = None,
    ) -> None:
        self.max_seconds = max_seconds
        self.interval = interval
        self.on_expire = on_expire
        self.elapsed = 0
        self.generation = 0
        self.running = False
        self._handle: Optional[asyncio.TimerHandle] = None

    def update(self, active: bool) -> None:
        """Stop, then restart if ``active`` and time remains."""
        self._stop()
        if active and self.elapsed < self.max_seconds:
            self.running = True
            self._schedule()

    def reset(self) -> None:
        self._stop()
        self.elapsed = 0

    def tick(self, generation: Optional[int] = None) -> bool:
        """Count one second. Returns False for stale or idle ticks."""
        if not self.running:
            return False
        if generation is not None and generation != self.generation:
            return False
        self.elapsed += 1
        if self.elapsed >= self.max_seconds:
            self.elapsed = self.max_seconds
            self._stop()
            logger.info("timer reached %s seconds", self.max_seconds)
            if self.on_expire is not None:
                self.on_expire()
        return True

    def _stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.running = False
        self.generation += 1

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._handle = loop.call_later(self.interval, self._fire, self.generation)

    def _fire(self, generation: int) -> None:
        self._handle = None
        if self.tick(generation) and self.running:
            self._schedule()
