"""
Cooperative scheduling for playback ticks.

The engine never sleeps or spawns threads. It asks a Scheduler to call it
back on a fixed period and keeps the returned ScheduledCall so pause/reset
can cancel it. PollingScheduler runs everything on the caller's thread: the
main loop (pygame frame loop or headless loop) pumps run_due(), so ticks and
commands can never interleave.
"""

import logging
import math
import time
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger('routeplay.scheduler')


class ScheduledCall:
    """Handle for a recurring callback registered with a PollingScheduler."""

    def __init__(
        self,
        scheduler: 'PollingScheduler',
        interval_s: float,
        callback: Callable[[], None],
        due: float,
    ):
        self._scheduler = scheduler
        self.interval_s = interval_s
        self.callback = callback
        self.due = due

    @property
    def active(self) -> bool:
        """True while the call is still registered with its scheduler."""
        return self._scheduler is not None and self in self._scheduler._calls

    def cancel(self) -> None:
        """Remove the call from its scheduler. Safe to call repeatedly."""
        if self._scheduler is not None:
            self._scheduler._remove(self)
            self._scheduler = None


class Scheduler(Protocol):
    """Protocol for tick sources used by PlaybackEngine."""
    def call_every(self, interval_s: float, callback: Callable[[], None]) -> ScheduledCall: ...


class PollingScheduler:
    """
    Single-threaded scheduler pumped from the owner's loop.

    Each due call fires at most once per run_due(). Repeating calls are
    re-armed one interval after their previous due time; if the loop stalled
    for more than a whole period the next due time restarts from now
    instead of firing a burst of missed ticks.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._calls: List[ScheduledCall] = []

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> ScheduledCall:
        if not (math.isfinite(interval_s) and interval_s > 0):
            raise ValueError(f"interval must be a positive finite number, got {interval_s}")
        call = ScheduledCall(self, interval_s, callback, self.clock() + interval_s)
        self._calls.append(call)
        return call

    def _remove(self, call: ScheduledCall) -> None:
        try:
            self._calls.remove(call)
        except ValueError:
            pass

    @property
    def pending(self) -> int:
        """Number of registered calls."""
        return len(self._calls)

    def time_until_next(self) -> Optional[float]:
        """Seconds until the next call is due (0 if overdue), None if idle."""
        if not self._calls:
            return None
        return max(0.0, min(c.due for c in self._calls) - self.clock())

    def run_due(self) -> int:
        """
        Fire every call that is due.

        Returns:
            Number of callbacks fired
        """
        now = self.clock()
        fired = 0
        # Snapshot: callbacks may cancel or register calls
        for call in list(self._calls):
            if call.due > now or not call.active:
                continue

            next_due = call.due + call.interval_s
            if next_due <= now:
                next_due = now + call.interval_s
            call.due = next_due

            call.callback()
            fired += 1

        return fired

    def cancel_all(self) -> None:
        """Cancel every registered call."""
        for call in list(self._calls):
            call.cancel()
        logger.debug("All scheduled calls cancelled")
