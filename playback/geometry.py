"""Kinematics utilities for recorded route samples."""

import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from config import EARTH_RADIUS_KM


def _get_lat_lon(point: Any) -> Tuple[float, float]:
    """Extract lat/lon from a point (tuple or object with .latitude/.longitude)."""
    if hasattr(point, 'latitude') and hasattr(point, 'longitude'):
        return point.latitude, point.longitude
    return point[0], point[1]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great circle distance between two GPS points in kilometres."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_km(a: Any, b: Any) -> float:
    """
    Great circle distance between two coordinates in kilometres.

    Points can be (lat, lon) tuples or objects with .latitude/.longitude.
    """
    lat1, lon1 = _get_lat_lon(a)
    lat2, lon2 = _get_lat_lon(b)
    return haversine_distance(lat1, lon1, lat2, lon2)


def parse_timestamp(value: Any, naive_as_utc: bool = True) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp.

    A trailing 'Z' is accepted. Naive values are taken as UTC unless
    naive_as_utc is False, in which case they are returned naive.
    Returns None if the value cannot be parsed.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            text = value.strip()
            if text.endswith('Z') or text.endswith('z'):
                text = text[:-1] + '+00:00'
            parsed = datetime.fromisoformat(text)
        except (AttributeError, TypeError, ValueError):
            return None

    if parsed.tzinfo is None and naive_as_utc:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def hours_between(earlier: Any, later: Any) -> Optional[float]:
    """Signed hours from one timestamp to another, None if either is unparseable."""
    start = parse_timestamp(earlier)
    end = parse_timestamp(later)
    if start is None or end is None:
        return None
    return (end - start).total_seconds() / 3600.0


def speed_kmh(prev: Any, curr: Any) -> float:
    """
    Average speed in km/h between two timestamped samples.

    Non-increasing or unparseable timestamps give 0.0, so the result is
    always a finite, non-negative number.
    """
    hours = hours_between(prev.timestamp, curr.timestamp)
    if hours is None or hours <= 0:
        return 0.0

    speed = distance_km(prev, curr) / hours
    if not math.isfinite(speed):
        return 0.0
    return speed


def bearing_degrees(prev: Any, curr: Any) -> float:
    """
    Heading from prev to curr in degrees, range (-180, 180].

    Planar approximation atan2(dlon, dlat), good enough to orient a marker
    over short legs. Not a geodesic bearing.
    """
    lat1, lon1 = _get_lat_lon(prev)
    lat2, lon2 = _get_lat_lon(curr)

    angle = math.degrees(math.atan2(lon2 - lon1, lat2 - lat1))
    if angle <= -180.0:
        angle += 360.0
    return angle


def cumulative_distances(points: List[Any]) -> List[float]:
    """Calculate cumulative distance in km along a list of points.

    Points can be (lat, lon) tuples or objects with .latitude/.longitude.
    """
    if not points:
        return []
    distances = [0.0]
    for i in range(1, len(points)):
        distances.append(distances[-1] + distance_km(points[i - 1], points[i]))
    return distances
