"""Virtual-clock scheduler: the single deferred-callback primitive.

Both engines arm their cycle timers and their per-entry emission timers
here. Timers are kept in a heap ordered by (fire_at, seq), so timers due at
the same instant fire in the order they were armed and a replay with the
same seed is reproducible.

Time is in milliseconds. `now()` is the elapsed virtual time since the
scheduler was created; `wall_time_ms()` adds the epoch and is what log
entries carry as their timestamp.
"""
import heapq
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger


@dataclass(order=True)
class TimerHandle:
    """A pending callback. Cancelling marks it; the heap drops it lazily."""
    fire_at: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    owner: Optional[str] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler:
    """Single-threaded timer queue driven by explicit clock advancement."""

    def __init__(self, epoch_ms: Optional[float] = None):
        """
        Args:
            epoch_ms: Wall-clock time (epoch ms) that virtual time 0 maps to.
                      Defaults to the current time.
        """
        self.epoch_ms = float(epoch_ms) if epoch_ms is not None else time.time() * 1000
        self._now = 0.0
        self._queue: List[TimerHandle] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def wall_time_ms(self) -> int:
        return int(self.epoch_ms + self._now)

    def call_later(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        owner: Optional[str] = None,
    ) -> TimerHandle:
        """Arm a timer `delay_ms` from now. Negative delays fire immediately."""
        handle = TimerHandle(
            fire_at=self._now + max(delay_ms, 0.0),
            seq=next(self._seq),
            callback=callback,
            owner=owner,
        )
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    def cancel_owner(self, owner: str) -> int:
        """Cancel every pending timer armed for `owner`. Returns the count."""
        count = 0
        for handle in self._queue:
            if handle.owner == owner and not handle.cancelled:
                handle.cancel()
                count += 1
        return count

    def pending(self, owner: Optional[str] = None) -> int:
        return sum(
            1 for h in self._queue
            if not h.cancelled and (owner is None or h.owner == owner)
        )

    def next_fire_at(self) -> Optional[float]:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0].fire_at if self._queue else None

    def run_until(self, until_ms: float) -> int:
        """Fire every timer due at or before `until_ms`, in order.

        Callbacks may arm new timers; those fire too if they fall inside the
        window. Returns the number of callbacks fired.
        """
        fired = 0
        while self._queue and self._queue[0].fire_at <= until_ms:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = handle.fire_at
            handle.callback()
            fired += 1
        self._now = max(self._now, until_ms)
        return fired

    def advance(self, delta_ms: float) -> int:
        return self.run_until(self._now + delta_ms)

    def run_realtime(self, duration_s: float, speed: float = 1.0, poll_s: float = 0.25) -> int:
        """Drive virtual time from the wall clock for `duration_s` seconds.

        Sleeps between due timers the way a live polling loop does; `speed`
        compresses wall time (2.0 runs the feed twice as fast).
        """
        logger.info(f"Realtime run: {duration_s:.0f}s at {speed:.1f}x")
        fired = 0
        start_wall = time.monotonic()
        start_virtual = self._now
        deadline = start_wall + duration_s
        try:
            while True:
                wall_now = time.monotonic()
                if wall_now >= deadline:
                    break
                target = start_virtual + (wall_now - start_wall) * 1000 * speed
                fired += self.run_until(target)
                next_at = self.next_fire_at()
                if next_at is None:
                    sleep_s = poll_s
                else:
                    sleep_s = min(poll_s, max((next_at - self._now) / 1000 / speed, 0.0))
                time.sleep(min(sleep_s, max(deadline - time.monotonic(), 0.0)))
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        return fired

    def __len__(self) -> int:
        return self.pending()
