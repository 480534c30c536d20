"""
Unit tests for route data structures.
Tests Route, RoutePoint and PlaybackState from playback/models.py.
"""

import dataclasses

import pytest

from playback.models import PlaybackState, Route, RoutePoint
from tests.fixtures.route_test_data import CITY_DRIVE, EQUATOR_DEGREE_KM, make_route


class TestRoutePoint:
    """Tests for RoutePoint."""

    @pytest.mark.unit
    def test_coordinate(self):
        point = RoutePoint(51.5, -0.12, '2024-01-01T00:00:00Z')
        assert point.coordinate == (51.5, -0.12)

    @pytest.mark.unit
    def test_immutable(self):
        point = RoutePoint(51.5, -0.12, '2024-01-01T00:00:00Z')
        with pytest.raises(dataclasses.FrozenInstanceError):
            point.latitude = 0.0


class TestRoute:
    """Tests for Route sequence behaviour and derived values."""

    @pytest.mark.unit
    def test_empty_route(self):
        route = Route()
        assert len(route) == 0
        assert route.coordinates() == []
        assert route.completed_path(3) == []
        assert route.bounds() is None
        assert route.total_distance_km() == 0.0
        assert route.duration_seconds() == 0.0

    @pytest.mark.unit
    def test_keeps_insertion_order(self):
        """Test that the route is never re-sorted by timestamp."""
        late = RoutePoint(1.0, 1.0, '2024-01-01T02:00:00Z')
        early = RoutePoint(0.0, 0.0, '2024-01-01T01:00:00Z')
        route = Route([late, early])
        assert list(route) == [late, early]

    @pytest.mark.unit
    def test_indexing_and_slicing(self, city_route):
        assert city_route[0].latitude == CITY_DRIVE[0]['latitude']
        assert city_route[-1].timestamp == CITY_DRIVE[-1]['timestamp']
        head = city_route[:2]
        assert isinstance(head, Route)
        assert len(head) == 2

    @pytest.mark.unit
    def test_equality(self):
        assert make_route(CITY_DRIVE) == make_route(CITY_DRIVE)
        assert make_route(CITY_DRIVE) != make_route(CITY_DRIVE[:2])

    @pytest.mark.unit
    def test_completed_path_inclusive(self, city_route):
        path = city_route.completed_path(2)
        assert path == [p.coordinate for p in list(city_route)[:3]]

    @pytest.mark.unit
    def test_completed_path_clamped(self, city_route):
        assert len(city_route.completed_path(99)) == len(city_route)
        assert city_route.completed_path(-5) == [city_route[0].coordinate]

    @pytest.mark.unit
    def test_bounds(self, city_route):
        min_lat, max_lat, min_lon, max_lon = city_route.bounds()
        assert min_lat == 51.5074
        assert max_lat == 51.5101
        assert min_lon == -0.1278
        assert max_lon == -0.1224

    @pytest.mark.unit
    def test_total_distance(self, equator_route):
        assert equator_route.total_distance_km() == pytest.approx(EQUATOR_DEGREE_KM, abs=0.01)

    @pytest.mark.unit
    def test_duration(self, city_route):
        assert city_route.duration_seconds() == 60.0

    @pytest.mark.unit
    def test_duration_unparseable(self):
        route = Route([RoutePoint(0, 0, 'bad'), RoutePoint(0, 1, '2024-01-01T00:00:00Z')])
        assert route.duration_seconds() == 0.0


class TestPlaybackState:
    """Tests for PlaybackState derived values."""

    @pytest.mark.unit
    def test_defaults(self):
        state = PlaybackState()
        assert state.current_index == 0
        assert state.is_playing is False
        assert state.elapsed_seconds == 0.0
        assert state.current_speed_kmh == 0.0
        assert state.start_time is None

    @pytest.mark.unit
    def test_progress_fraction(self):
        assert PlaybackState(current_index=0, route_length=4).progress_fraction == 0.25
        assert PlaybackState(current_index=3, route_length=4).progress_fraction == 1.0

    @pytest.mark.unit
    def test_progress_empty_route(self):
        assert PlaybackState().progress_fraction == 0.0

    @pytest.mark.unit
    def test_is_at_end(self):
        assert PlaybackState(current_index=3, route_length=4).is_at_end is True
        assert PlaybackState(current_index=2, route_length=4).is_at_end is False
        assert PlaybackState().is_at_end is False
