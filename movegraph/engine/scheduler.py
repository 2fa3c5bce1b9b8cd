"""Schedule-with-replace timers.

The engine has two delayed actions, recenter and remeasure, and must never
have more than one of each pending. ``Debouncer`` enforces that on top of
any ``Scheduler`` (Tk's ``after``, a virtual clock, ...): scheduling an
action of some kind cancels the outstanding one of the same kind and
returns a fresh ``CancellationToken``. A token only runs its callback if it
is still the latest token for its kind, so a timer that slips through a
cancel race cannot apply stale state.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Any, Callable, Hashable, Protocol


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> Any:
        """Run ``callback`` after ``delay_ms``. Returns a cancel handle."""
        ...

    def cancel(self, handle: Any) -> None: ...


class CancellationToken:
    def __init__(self, kind: Hashable, generation: int) -> None:
        self.kind = kind
        self.generation = generation
        self.cancelled = False
        self.fired = False
        self.handle: Any = None

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self) -> str:
        return (
            f"CancellationToken({self.kind!r}, {self.generation}, "
            f"pending={self.pending})"
        )


class Debouncer:
    def __init__(self, scheduler: Scheduler) -> None:
        self._scheduler = scheduler
        self._latest: dict[Hashable, CancellationToken] = {}
        self._generations = itertools.count(1)

    def schedule(
        self, kind: Hashable, delay_ms: int, callback: Callable[[], None]
    ) -> CancellationToken:
        self.cancel(kind)
        token = CancellationToken(kind, next(self._generations))
        self._latest[kind] = token

        def fire() -> None:
            if token.cancelled or self._latest.get(kind) is not token:
                return
            token.fired = True
            del self._latest[kind]
            callback()

        token.handle = self._scheduler.call_later(delay_ms, fire)
        return token

    def cancel(self, kind: Hashable) -> None:
        token = self._latest.pop(kind, None)
        if token is None:
            return
        token.cancelled = True
        self._scheduler.cancel(token.handle)

    def cancel_all(self) -> None:
        for kind in list(self._latest):
            self.cancel(kind)

    def pending(self, kind: Hashable) -> bool:
        return kind in self._latest


class ManualScheduler:
    """Virtual-time scheduler driven by ``advance()``.

    Used by headless hosts and tests. Callbacks due at the same time run in
    the order they were scheduled.
    """

    def __init__(self) -> None:
        self.now = 0
        self._queue: list[tuple[int, int, Callable[[], None]]] = []
        self._cancelled: set[int] = set()
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> int:
        handle = next(self._seq)
        heapq.heappush(self._queue, (self.now + delay_ms, handle, callback))
        return handle

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            self._cancelled.add(handle)

    def advance(self, ms: int) -> int:
        """Move the clock forward, firing due callbacks. Returns # fired."""
        target = self.now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, handle, callback = heapq.heappop(self._queue)
            self.now = when
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            callback()
            fired += 1
        self.now = target
        return fired

    @property
    def pending_count(self) -> int:
        return sum(1 for _, h, _ in self._queue if h not in self._cancelled)
