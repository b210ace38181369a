"""engine.scheduler

Real-time driver for a GameSession.

The scheduler owns the last-tick timestamp and the asyncio handle. Each frame advances
at most one simulated day (plus the month update when the day crosses a month boundary);
missed intervals are dropped, not caught up. While paused, or while a decision is
pending, frames idle and keep re-arming the timestamp.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from .actions import AdvanceDay, AdvanceMonth
from .session import GameSession


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class Scheduler:
    def __init__(self, session: GameSession, clock: Callable[[], float] = monotonic_ms) -> None:
        self.session = session
        self.clock = clock
        self.last_tick_ms: Optional[float] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def frame(self, now_ms: float) -> bool:
        """One scheduling decision. True when a day was advanced."""
        state = self.session.state
        interval = self.session.config.day_interval_ms(state.time.speed)
        idle = (
            not state.started
            or not state.time.is_playing
            or interval <= 0
            or state.events.active_event is not None
        )
        if idle or self.last_tick_ms is None:
            self.last_tick_ms = now_ms
            return False
        if now_ms - self.last_tick_ms < interval:
            return False

        self.last_tick_ms = now_ms
        before = state.time.date
        after = self.session.dispatch(AdvanceDay()).time.date
        if after == before:
            return False
        if (after.year, after.month) != (before.year, before.month):
            self.session.dispatch(AdvanceMonth())
        return True

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if self._handle is not None:
            return
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._loop = None

    def _schedule(self) -> None:
        assert self._loop is not None
        delay = self.session.config.frame_interval_ms / 1000.0
        self._handle = self._loop.call_later(delay, self._run)

    def _run(self) -> None:
        if self._handle is None:
            return
        self.frame(self.clock())
        if self._handle is not None:
            self._schedule()
