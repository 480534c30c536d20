#!/usr/bin/env python3
"""
routeplay - Vehicle route playback
Replays a recorded route on a map, one sample per tick, with live speed,
elapsed time and progress.
"""

import argparse
import logging
import math
import sys
import time

import pygame

from config import (
    APP_VERSION,
    DEFAULT_ROUTE_FILE,
    FPS_TARGET,
    HEADLESS_IDLE_SLEEP_S,
    MIN_TICK_INTERVAL_S,
    WINDOW_TITLE,
)
from playback import (
    PlaybackEngine,
    PlaybackPresenter,
    PollingScheduler,
    Route,
    RouteLoader,
    RouteLoadError,
)
from core import EventHandlerMixin
from gui.route_display import RouteDisplay
from playback.presenter import status_panel
from utils.settings import get_settings, load_preferences

logger = logging.getLogger('routeplay')


class RoutePlayer(EventHandlerMixin):
    """Window hosting the map view, driven by a polling scheduler."""

    def __init__(self, route: Route, tick_interval_s: float, width: int, height: int,
                 follow_vehicle: bool, settings):
        self.width = width
        self.height = height
        self.follow_vehicle = follow_vehicle
        self.settings = settings
        self.running = False

        self.scheduler = PollingScheduler()
        self.engine = PlaybackEngine(route, scheduler=self.scheduler, tick_interval_s=tick_interval_s)
        self.presenter = PlaybackPresenter(self.engine)
        self.display = None

    def run(self):
        """Main application loop."""
        pygame.init()
        try:
            screen = pygame.display.set_mode((self.width, self.height))
            pygame.display.set_caption(WINDOW_TITLE)
            self.display = RouteDisplay(self.width, self.height, follow_vehicle=self.follow_vehicle)
            clock = pygame.time.Clock()

            self.running = True
            logger.info("Space: play/pause, R: reset, F: follow vehicle, Esc: quit")
            while self.running:
                self._handle_events()
                self.scheduler.run_due()
                self.display.draw(screen, self.presenter)
                pygame.display.flip()
                clock.tick(FPS_TARGET)
        finally:
            self._cleanup()

    def _cleanup(self):
        self.presenter.close()
        self.engine.close()
        pygame.quit()


def run_headless(route: Route, tick_interval_s: float, clock=time.monotonic, sleep=time.sleep) -> int:
    """
    Play the route to the end without a window, printing each state change.

    Returns:
        Process exit code
    """
    scheduler = PollingScheduler(clock)

    def print_state(state):
        panel = status_panel(route, state)
        print(
            f"[{panel.elapsed}] {panel.progress:>9}  {panel.latitude}  {panel.longitude}  "
            f"{panel.speed:>12}  {panel.status}"
        )

    with PlaybackEngine(route, scheduler=scheduler, tick_interval_s=tick_interval_s,
                        clock=clock) as engine:
        engine.subscribe(print_state)
        if not engine.play():
            logger.warning("Nothing to play: route has %d sample(s)", len(route))
            return 0

        try:
            while engine.is_playing:
                wait = scheduler.time_until_next()
                sleep(wait if wait is not None else HEADLESS_IDLE_SLEEP_S)
                scheduler.run_due()
        except KeyboardInterrupt:
            print("\nShutting down...")

    return 0


def _interval_arg(text: str) -> float:
    """argparse type for --interval: a finite number of seconds."""
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval: {text!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise argparse.ArgumentTypeError(f"interval must be a positive finite number, got {text!r}")
    return value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Replay a recorded vehicle route on a map")
    parser.add_argument(
        "route", nargs="?", default=DEFAULT_ROUTE_FILE,
        help="Route file (.json or .gpx), default: bundled sample route",
    )
    parser.add_argument("--interval", type=_interval_arg, default=None,
                        help="Seconds between samples (default from settings, else 1.5)")
    parser.add_argument("--headless", action="store_true",
                        help="Play in the terminal without opening a window")
    parser.add_argument("--no-follow", action="store_true",
                        help="Do not keep the vehicle centred while playing")
    parser.add_argument("--width", type=int, default=None, help="Window width in pixels")
    parser.add_argument("--height", type=int, default=None, help="Window height in pixels")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"routeplay {APP_VERSION}")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = get_settings()
    prefs = load_preferences(settings)

    tick_interval_s = args.interval if args.interval is not None else prefs.tick_interval_s
    if tick_interval_s < MIN_TICK_INTERVAL_S:
        logger.warning("Interval %.3fs too small, using %.3fs", tick_interval_s, MIN_TICK_INTERVAL_S)
        tick_interval_s = MIN_TICK_INTERVAL_S

    try:
        route = RouteLoader(args.route).load()
    except RouteLoadError as e:
        logger.error("Failed to load route data: %s", e)
        return 1

    if args.headless:
        return run_headless(route, tick_interval_s)

    player = RoutePlayer(
        route,
        tick_interval_s=tick_interval_s,
        width=args.width or prefs.width,
        height=args.height or prefs.height,
        follow_vehicle=prefs.follow_vehicle and not args.no_follow,
        settings=settings,
    )
    player.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
