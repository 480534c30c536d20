"""
Core data structures for route playback.

Unit Conventions
----------------
- Coordinates: decimal degrees (WGS84), stored as (latitude, longitude)
- Distance: kilometres
- Speed: kilometres per hour (km/h)
- Bearing: degrees in (-180, 180], 0 = north, 90 = east
- Timestamps: ISO-8601 strings as recorded; parsed on demand
- Clock readings (start_time): seconds from the engine's monotonic clock
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .geometry import cumulative_distances, parse_timestamp

Coordinate = Tuple[float, float]


@dataclass(frozen=True)
class RoutePoint:
    """
    Single recorded sample of the route.

    Attributes:
        latitude: Latitude in decimal degrees (-90 to +90).
        longitude: Longitude in decimal degrees (-180 to +180).
        timestamp: ISO-8601 datetime string of when the sample was taken.
    """
    latitude: float
    longitude: float
    timestamp: str

    @property
    def coordinate(self) -> Coordinate:
        return (self.latitude, self.longitude)


class Route:
    """
    Immutable ordered sequence of RoutePoints.

    Insertion order is playback order. The route is never re-sorted, callers
    are responsible for chronological ordering.
    """

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[RoutePoint] = ()):
        self._points: Tuple[RoutePoint, ...] = tuple(points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[RoutePoint]:
        return iter(self._points)

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return Route(self._points[index])
        return self._points[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, Route):
            return self._points == other._points
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._points)

    def __repr__(self) -> str:
        return f"Route({len(self._points)} points)"

    @property
    def points(self) -> Tuple[RoutePoint, ...]:
        return self._points

    def coordinates(self) -> List[Coordinate]:
        """All coordinates of the route, used for the background path."""
        return [p.coordinate for p in self._points]

    def completed_path(self, index: int) -> List[Coordinate]:
        """Coordinates from the start up to and including index (clamped)."""
        if not self._points:
            return []
        index = max(0, min(index, len(self._points) - 1))
        return [p.coordinate for p in self._points[:index + 1]]

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Get bounds of the route (min_lat, max_lat, min_lon, max_lon)."""
        if not self._points:
            return None
        lats = [p.latitude for p in self._points]
        lons = [p.longitude for p in self._points]
        return (min(lats), max(lats), min(lons), max(lons))

    def total_distance_km(self) -> float:
        return cumulative_distances(self._points)[-1] if self._points else 0.0

    def duration_seconds(self) -> float:
        """Seconds between the first and last sample, 0.0 when unknown."""
        if len(self._points) < 2:
            return 0.0
        first = parse_timestamp(self._points[0].timestamp)
        last = parse_timestamp(self._points[-1].timestamp)
        if first is None or last is None:
            return 0.0
        return (last - first).total_seconds()


@dataclass(frozen=True)
class PlaybackState:
    """
    Read-only snapshot of the playback engine.

    Attributes:
        current_index: Index of the sample the vehicle is at (0 when empty).
        is_playing: True while ticks are scheduled.
        elapsed_seconds: Wall-clock seconds since playback was started,
            recomputed on every tick.
        current_speed_kmh: Speed between the previous and current sample.
        start_time: Clock reading of the first play() after construction or
            reset, None before that.
        route_length: Number of samples in the route being played.
    """
    current_index: int = 0
    is_playing: bool = False
    elapsed_seconds: float = 0.0
    current_speed_kmh: float = 0.0
    start_time: Optional[float] = None
    route_length: int = 0

    @property
    def progress_fraction(self) -> float:
        """Completion as fraction 0.0 to 1.0 (samples reached / total)."""
        if self.route_length <= 0:
            return 0.0
        return (self.current_index + 1) / self.route_length

    @property
    def is_at_end(self) -> bool:
        return self.route_length > 0 and self.current_index >= self.route_length - 1


@dataclass(frozen=True)
class RenderFrame:
    """
    Everything the map layer needs to draw one state.

    Attributes:
        current: Coordinate of the current sample, None for an empty route.
        completed_path: Coordinates from index 0 to the current index.
        bearing_degrees: Heading from the previous to the current sample,
            used to rotate the vehicle marker.
        is_playing: Whether playback is running (map follows the vehicle).
    """
    current: Optional[Coordinate]
    completed_path: List[Coordinate] = field(default_factory=list)
    bearing_degrees: float = 0.0
    is_playing: bool = False
