"""
Presentation adapter between PlaybackEngine and a renderer.

Turns engine snapshots into display-ready data: the render frame for the
map (vehicle position, completed path, marker bearing) and the text shown
in the status panel. Renderers read from here and send commands to the
engine; they never change engine state directly.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .geometry import bearing_degrees, parse_timestamp
from .models import Coordinate, PlaybackState, RenderFrame, RoutePoint

NO_DATA_MESSAGE = "No data available"


def current_point(route: Sequence[RoutePoint], state: PlaybackState) -> Optional[RoutePoint]:
    """Sample at the state's index (clamped), None for an empty route."""
    if len(route) == 0:
        return None
    return route[max(0, min(state.current_index, len(route) - 1))]


def build_frame(route: Sequence[RoutePoint], state: PlaybackState) -> RenderFrame:
    """Build the map rendering data for a state of the given route."""
    if len(route) == 0:
        return RenderFrame(current=None, completed_path=[], bearing_degrees=0.0,
                           is_playing=state.is_playing)

    index = max(0, min(state.current_index, len(route) - 1))
    bearing = 0.0
    if index > 0:
        bearing = bearing_degrees(route[index - 1], route[index])

    return RenderFrame(
        current=route[index].coordinate,
        completed_path=[p.coordinate for p in route[:index + 1]],
        bearing_degrees=bearing,
        is_playing=state.is_playing,
    )


def format_elapsed(seconds: float) -> str:
    """Format elapsed seconds as M:SS."""
    if seconds is None or seconds < 0:
        seconds = 0
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def format_timestamp(value: str) -> str:
    """
    Sample timestamp in local time, or the raw string if unparseable.

    Timestamps with an offset are converted to the local zone. Naive ones
    are already local wall time and are shown unchanged.
    """
    parsed = parse_timestamp(value, naive_as_utc=False)
    if parsed is None:
        return str(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


@dataclass(frozen=True)
class StatusPanel:
    """Text for the vehicle status, progress and summary cards."""
    has_data: bool
    latitude: str = ""
    longitude: str = ""
    timestamp: str = ""
    speed: str = "0.0 km/h"
    elapsed: str = "0:00"
    progress: str = "0 / 0"
    percent_complete: str = "0% Complete"
    progress_fraction: float = 0.0
    status: str = "Stopped"
    total_points: int = 0
    message: str = ""


def status_panel(route: Sequence[RoutePoint], state: PlaybackState) -> StatusPanel:
    """Build the status panel text for a state of the given route."""
    total = len(route)
    fraction = (state.current_index + 1) / total if total > 0 else 0.0
    status = "Moving" if state.is_playing else "Stopped"

    if total == 0:
        return StatusPanel(has_data=False, status=status, message=NO_DATA_MESSAGE)

    point = current_point(route, state)
    return StatusPanel(
        has_data=True,
        latitude=f"Lat: {point.latitude:.6f}",
        longitude=f"Lng: {point.longitude:.6f}",
        timestamp=format_timestamp(point.timestamp),
        speed=f"{state.current_speed_kmh:.1f} km/h",
        elapsed=format_elapsed(state.elapsed_seconds),
        progress=f"{state.current_index + 1} / {total}",
        percent_complete=f"{int(math.floor(fraction * 100 + 0.5))}% Complete",
        progress_fraction=fraction,
        status=status,
        total_points=total,
    )


class PlaybackPresenter:
    """
    Keeps the latest frame and panel for an engine.

    Subscribes to the engine so the cached values refresh on every state
    change. Renderers read ``frame``, ``panel`` and ``full_path``.
    """

    def __init__(self, engine):
        self.engine = engine
        self._route = engine.route
        self._full_path: List[Coordinate] = [p.coordinate for p in self._route]
        self.frame: RenderFrame = build_frame(engine.route, engine.state)
        self.panel: StatusPanel = status_panel(engine.route, engine.state)
        self.state: PlaybackState = engine.state
        self._unsubscribe = engine.subscribe(self._on_state)

    @property
    def full_path(self) -> List[Coordinate]:
        """Whole route, for the background reference path."""
        return self._full_path

    def _on_state(self, state: PlaybackState) -> None:
        route = self.engine.route
        if route is not self._route:
            # Route replaced via set_route()
            self._route = route
            self._full_path = [p.coordinate for p in route]
        self.state = state
        self.frame = build_frame(route, state)
        self.panel = status_panel(route, state)

    def close(self) -> None:
        self._unsubscribe()
