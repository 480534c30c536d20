"""
Route loading for playback.

Reads recorded routes from JSON (array of {latitude, longitude, timestamp})
or GPX (track points with <time>) and validates every sample before it is
handed to the engine. Malformed data never reaches PlaybackEngine.
"""

import json
import logging
import math
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .geometry import parse_timestamp
from .models import Route, RoutePoint

logger = logging.getLogger('routeplay.route_loader')

# Match on local name so any GPX namespace version, or none, loads
GPX_ANY_NS = '{*}'


class RouteLoadError(ValueError):
    """Raised when a route source is missing, unreadable or malformed."""


def _coerce_coordinate(value: Any, name: str, limit: float, index: int) -> float:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise RouteLoadError(f"Sample {index}: {name} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise RouteLoadError(f"Sample {index}: {name} must be a number, got {value!r}") from None
    if not math.isfinite(number) or abs(number) > limit:
        raise RouteLoadError(f"Sample {index}: {name} {number} outside [-{limit:g}, {limit:g}]")
    return number


def make_point(latitude: Any, longitude: Any, timestamp: Any, index: int = 0) -> RoutePoint:
    """
    Build a validated RoutePoint.

    Raises:
        RouteLoadError: if a coordinate is missing/out of range or the
            timestamp cannot be parsed as ISO-8601
    """
    lat = _coerce_coordinate(latitude, 'latitude', 90.0, index)
    lon = _coerce_coordinate(longitude, 'longitude', 180.0, index)
    if not isinstance(timestamp, str) or parse_timestamp(timestamp) is None:
        raise RouteLoadError(f"Sample {index}: unparseable timestamp {timestamp!r}")
    return RoutePoint(latitude=lat, longitude=lon, timestamp=timestamp)


def parse_route_data(data: Any) -> Route:
    """
    Convert decoded JSON into a Route.

    Args:
        data: List of objects with latitude, longitude and timestamp keys

    Returns:
        Route in the order given
    """
    if not isinstance(data, list):
        raise RouteLoadError(f"Route must be a JSON array, got {type(data).__name__}")

    points = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise RouteLoadError(f"Sample {i}: expected an object, got {type(item).__name__}")
        missing = [k for k in ('latitude', 'longitude', 'timestamp') if k not in item]
        if missing:
            raise RouteLoadError(f"Sample {i}: missing {', '.join(missing)}")
        points.append(make_point(item['latitude'], item['longitude'], item['timestamp'], i))

    _warn_if_unordered(points)
    return Route(points)


def _warn_if_unordered(points: List[RoutePoint]) -> None:
    """Log samples whose timestamp goes backwards. Order is kept as given."""
    previous = None
    for i, point in enumerate(points):
        current = parse_timestamp(point.timestamp)
        if previous is not None and current < previous:
            logger.warning(
                "Sample %d timestamp %s is earlier than the previous sample, speed will read 0",
                i, point.timestamp,
            )
        previous = current


class RouteLoader:
    """Load a recorded route from a .json or .gpx file."""

    def __init__(self, path: str):
        """
        Initialise route loader.

        Args:
            path: Path to a JSON or GPX route file
        """
        self.path = Path(path)
        self._route: Optional[Route] = None

    def load(self) -> Route:
        """
        Read and validate the route file.

        Raises:
            RouteLoadError: if the file is missing or malformed
        """
        if not self.path.is_file():
            raise RouteLoadError(f"Route file not found: {self.path}")

        suffix = self.path.suffix.lower()
        if suffix == '.gpx':
            route = self._parse_gpx()
        elif suffix == '.json':
            route = self._parse_json()
        else:
            raise RouteLoadError(f"Unsupported route format '{suffix}' (expected .json or .gpx)")

        self._route = route
        logger.info("Loaded %d route points from %s", len(route), self.path)
        return route

    @property
    def is_loaded(self) -> bool:
        """Check if route is loaded."""
        return self._route is not None

    @property
    def point_count(self) -> int:
        """Get number of route points."""
        return len(self._route) if self._route is not None else 0

    @property
    def route(self) -> Optional[Route]:
        return self._route

    def get_route_bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Get bounds of the route (min_lat, max_lat, min_lon, max_lon)."""
        if self._route is None:
            return None
        return self._route.bounds()

    def _parse_json(self) -> Route:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RouteLoadError(f"Malformed JSON in {self.path}: {e}") from e
        except OSError as e:
            raise RouteLoadError(f"Could not read {self.path}: {e}") from e
        return parse_route_data(data)

    def _parse_gpx(self) -> Route:
        """Parse GPX file and extract timed track points."""
        try:
            root = ET.parse(self.path).getroot()
        except ET.ParseError as e:
            raise RouteLoadError(f"Malformed GPX in {self.path}: {e}") from e
        except OSError as e:
            raise RouteLoadError(f"Could not read {self.path}: {e}") from e

        # Track points first, then route points
        elements = root.findall(f'.//{GPX_ANY_NS}trkpt')
        if not elements:
            elements = root.findall(f'.//{GPX_ANY_NS}rtept')
        if not elements:
            logger.warning("No track or route points found in %s", self.path)

        points = []
        for i, element in enumerate(elements):
            time_element = element.find(f'{GPX_ANY_NS}time')
            timestamp = time_element.text.strip() if time_element is not None and time_element.text else None
            points.append(make_point(element.get('lat'), element.get('lon'), timestamp, i))

        _warn_if_unordered(points)
        return Route(points)
