"""
Playback engine for replaying a recorded route.

Owns simulation time for a single vehicle: the current sample index,
play/pause state, elapsed wall-clock time and the speed derived from the
last two samples. Advances one sample per tick on a fixed cadence.
"""

import logging
import math
import time
from typing import Callable, List, Optional, Sequence

from config import TICK_INTERVAL_S
from .geometry import speed_kmh
from .models import PlaybackState, RenderFrame, Route, RoutePoint
from .presenter import build_frame
from .scheduler import PollingScheduler, ScheduledCall, Scheduler

logger = logging.getLogger('routeplay.engine')

StateListener = Callable[[PlaybackState], None]


class PlaybackEngine:
    """
    Replays a Route one sample per tick.

    State Machine
    -------------
    Stopped (initial), Playing and Paused, modelled as ``is_playing`` plus a
    nullable ``start_time`` (Paused is Stopped with start_time set).

    - play():  Stopped/Paused -> Playing, only if a later sample exists
    - pause(): Playing -> Paused
    - reset(): any -> Stopped, all fields back to construction defaults
    - tick:    Playing -> Playing (advance) or Paused (end of route)

    Timer Discipline
    ----------------
    At most one recurring tick is registered with the scheduler. pause(),
    reset(), set_route() and close() cancel it before returning, so no tick
    fires after a transition out of Playing. Ticks run on the scheduler's
    thread of control, each one completes its whole state update before the
    next can start.

    Degenerate input never raises: commands on an empty route, play() at
    the final sample and commands after close() are no-ops.
    """

    def __init__(
        self,
        route: Sequence[RoutePoint] = (),
        scheduler: Optional[Scheduler] = None,
        tick_interval_s: float = TICK_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialise the engine.

        Args:
            route: Ordered samples to replay, never mutated or re-sorted
            scheduler: Tick source, defaults to a PollingScheduler on clock
            tick_interval_s: Seconds between ticks
            clock: Monotonic clock used for elapsed time
        """
        if not (math.isfinite(tick_interval_s) and tick_interval_s > 0):
            raise ValueError(f"tick interval must be a positive finite number, got {tick_interval_s}")

        self.clock = clock
        self.scheduler = scheduler if scheduler is not None else PollingScheduler(clock)
        self.tick_interval_s = tick_interval_s

        self._route: Sequence[RoutePoint] = route if isinstance(route, Route) else Route(route)
        self._tick_call: Optional[ScheduledCall] = None
        self._listeners: List[StateListener] = []
        self._closed = False

        self._current_index = 0
        self._is_playing = False
        self._elapsed_seconds = 0.0
        self._current_speed_kmh = 0.0
        self._start_time: Optional[float] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def route(self) -> Sequence[RoutePoint]:
        return self._route

    @property
    def state(self) -> PlaybackState:
        return self.snapshot()

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def tick_pending(self) -> bool:
        """True while a tick is registered with the scheduler."""
        return self._tick_call is not None and self._tick_call.active

    def snapshot(self) -> PlaybackState:
        """Return an immutable copy of the current playback state."""
        return PlaybackState(
            current_index=self._current_index,
            is_playing=self._is_playing,
            elapsed_seconds=self._elapsed_seconds,
            current_speed_kmh=self._current_speed_kmh,
            start_time=self._start_time,
            route_length=len(self._route),
        )

    def current_point(self) -> Optional[RoutePoint]:
        if not self._route:
            return None
        return self._route[self._current_index]

    def frame(self) -> RenderFrame:
        """Rendering data for the map layer: position, completed path, bearing."""
        return build_frame(self._route, self.snapshot())

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener called with the new state after every change.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, before: PlaybackState, force: bool = False) -> None:
        after = self.snapshot()
        if after == before and not force:
            return
        for listener in list(self._listeners):
            try:
                listener(after)
            except Exception:
                logger.exception("Playback listener %r failed", listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def play(self) -> bool:
        """
        Start or resume playback.

        Returns:
            True if playback started, False if the command was a no-op
            (closed, already playing, empty route or already at the end)
        """
        if self._closed or self._is_playing:
            return False
        if len(self._route) == 0 or self._current_index >= len(self._route) - 1:
            logger.debug("play() ignored at index %d of %d", self._current_index, len(self._route))
            return False

        before = self.snapshot()
        if self._start_time is None:
            self._start_time = self.clock()

        self._cancel_tick()
        self._tick_call = self.scheduler.call_every(self.tick_interval_s, self._tick)
        self._is_playing = True
        logger.info("Playback started at sample %d/%d", self._current_index + 1, len(self._route))
        self._notify(before)
        return True

    def pause(self) -> bool:
        """
        Pause playback, keeping index, elapsed time and start time.

        Returns:
            True if playback was running and is now paused
        """
        if self._closed or not self._is_playing:
            return False

        before = self.snapshot()
        self._stop()
        logger.info("Playback paused at sample %d/%d", self._current_index + 1, len(self._route))
        self._notify(before)
        return True

    def toggle(self) -> bool:
        """Pause if playing, otherwise play. Returns True if state changed."""
        if self._is_playing:
            return self.pause()
        return self.play()

    def reset(self) -> None:
        """Stop playback and return to construction defaults."""
        if self._closed:
            return

        before = self.snapshot()
        self._cancel_tick()
        self._current_index = 0
        self._is_playing = False
        self._elapsed_seconds = 0.0
        self._current_speed_kmh = 0.0
        self._start_time = None
        if before != self.snapshot():
            logger.info("Playback reset")
        self._notify(before)

    def set_route(self, route: Sequence[RoutePoint]) -> None:
        """Replace the route being played and reset playback."""
        if self._closed:
            return

        before = self.snapshot()
        self._cancel_tick()
        self._route = route if isinstance(route, Route) else Route(route)
        self._current_index = 0
        self._is_playing = False
        self._elapsed_seconds = 0.0
        self._current_speed_kmh = 0.0
        self._start_time = None
        logger.info("Route loaded with %d samples", len(self._route))
        self._notify(before, force=True)

    def close(self) -> None:
        """Cancel any pending tick and detach listeners. Idempotent."""
        if self._closed:
            return
        self._cancel_tick()
        self._is_playing = False
        self._listeners.clear()
        self._closed = True
        logger.debug("Playback engine closed")

    def __enter__(self) -> 'PlaybackEngine':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cancel_tick(self) -> None:
        if self._tick_call is not None:
            self._tick_call.cancel()
            self._tick_call = None

    def _stop(self) -> None:
        self._cancel_tick()
        self._is_playing = False

    def _tick(self) -> None:
        """Advance one sample. Called by the scheduler while playing."""
        if not self._is_playing:
            return

        before = self.snapshot()
        next_index = self._current_index + 1

        if next_index >= len(self._route):
            self._stop()
            logger.info("End of route reached, playback paused")
            self._notify(before)
            return

        self._current_index = next_index
        self._current_speed_kmh = speed_kmh(
            self._route[next_index - 1], self._route[next_index]
        )
        if self._start_time is not None:
            self._elapsed_seconds = self.clock() - self._start_time

        if next_index >= len(self._route) - 1:
            # Final sample: nothing left to advance to
            self._stop()
            logger.info("End of route reached, playback paused")

        self._notify(before)
