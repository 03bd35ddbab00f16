"""Photo streaming poll loop.

While a user's streaming flag is on, a timer ticks every ``poll_interval``
seconds and takes a photo whenever the user's next-capture time has passed.
Before each capture the next-capture time is pushed ``guard_window`` seconds
ahead so ticks that fire during a slow capture do nothing. After a successful
capture it is reset to "now", which means capture latency, not the guard
window, sets the real cadence. ``hold_guard_after_capture`` keeps the guard
window instead.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Callable

from glassphoto.common.logging import get_logger
from glassphoto.photos import PhotoCache
from glassphoto.session.base import Session
from glassphoto.state import UserStateTable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class PhotoStreamer:
    """Recurring capture task for one session."""

    def __init__(
        self,
        session: Session,
        user_id: str,
        table: UserStateTable,
        cache: PhotoCache,
        poll_interval: float = 1.0,
        guard_window: float = 30.0,
        hold_guard_after_capture: bool = False,
        clock: Clock = now_ms,
    ) -> None:
        self.session = session
        self.user_id = user_id
        self.poll_interval = poll_interval
        self.guard_window_ms = int(guard_window * 1000)
        self.hold_guard_after_capture = hold_guard_after_capture
        self._table = table
        self._cache = cache
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self.logger = get_logger("streaming", user_id=user_id)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def idle(self) -> bool:
        """True when no capture started by the timer is still running."""
        return not self._inflight

    def start(self) -> None:
        """Start ticking. Calling start twice is a no-op."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name=f"photo-stream-{self.user_id}")
        self.logger.debug("stream_timer_started", interval=self.poll_interval)

    async def stop(self) -> None:
        """Cancel the timer. In-flight captures are left to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self.logger.debug("stream_timer_stopped", inflight=len(self._inflight))

    async def wait_idle(self) -> None:
        """Wait for in-flight captures to complete."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            task = asyncio.create_task(self.tick())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def tick(self) -> bool:
        """Run one poll. Returns True when a photo was captured and cached."""
        state = self._table.row(self.user_id)
        if not state.streaming or self._clock() <= (state.next_photo_time or 0):
            return False

        state.next_photo_time = self._clock() + self.guard_window_ms
        try:
            photo = await self.session.request_photo()
        except Exception as e:
            self.logger.error("auto_capture_failed", error=str(e))
            return False

        # A stopped session has no next-capture time; don't bring it back
        if state.next_photo_time is not None:
            state.next_photo_time = self._clock()
            if self.hold_guard_after_capture:
                state.next_photo_time += self.guard_window_ms

        self._cache.store(self.user_id, photo)
        return True
