# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single-threaded timer scheduling.

All navigation state is owned by one execution context. Timers never run
on their own thread; they are queued onto that context (an asyncio loop,
or a manually advanced clock in tests and replays) so a timeout can never
interleave with a room-changed notification.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay_s), callback)


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """Deterministic clock: callbacks run only when time is advanced.

    Due callbacks run in (due time, arming order).
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self._now + max(0.0, delay_s), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Returns the number of callbacks executed.
        """
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if handle.cancelled():
                continue
            handle.cancel()
            handle.callback()
            ran += 1
        self._now = target
        return ran

    def run_pending(self) -> int:
        """Run everything already due at the current time."""
        return self.advance(0.0)


class TimerSlots:
    """At most one live timer per named kind.

    Arming a kind cancels the previous timer of that kind. Every callback is
    wrapped with a generation check so a timer that was cancelled after it
    was already dequeued still does nothing.
    """

    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._handles: dict[str, TimerHandle] = {}
        self._generation: dict[str, int] = {}

    def arm(self, kind: str, delay_s: float, callback: Callable[[], None]) -> None:
        self.cancel(kind)
        generation = self._generation.get(kind, 0)

        def fire() -> None:
            if self._generation.get(kind, 0) != generation:
                return
            self._handles.pop(kind, None)
            callback()

        self._handles[kind] = self._scheduler.call_later(delay_s, fire)

    def cancel(self, kind: str) -> None:
        self._generation[kind] = self._generation.get(kind, 0) + 1
        handle = self._handles.pop(kind, None)
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for kind in set(self._generation) | set(self._handles):
            self.cancel(kind)

    def is_armed(self, kind: str) -> bool:
        return kind in self._handles
