"""
Unit tests for map drawing helpers.
Tests projection, marker geometry and dash splitting from gui/route_display.py.
"""

import math
import os

import numpy as np
import pytest

from gui.route_display import MapProjection, RouteDisplay, dashed_segments, marker_polygon


class TestMapProjection:
    """Tests for fit-to-rectangle projection."""

    @pytest.mark.unit
    def test_square_route_fills_rect(self):
        projection = MapProjection([(0.0, 0.0), (1.0, 1.0)], (0, 0, 100, 100), padding=0)
        assert projection.to_screen(1.0, 0.0) == (0, 0)  # North-west corner
        assert projection.to_screen(0.0, 1.0) == (100, 100)  # South-east corner
        assert projection.to_screen(0.0, 0.0) == (0, 100)

    @pytest.mark.unit
    def test_keeps_aspect_ratio(self):
        """Test a wide route is scaled by its longitude span and centred vertically."""
        projection = MapProjection([(0.0, 0.0), (1.0, 2.0)], (0, 0, 100, 100), padding=0)
        assert projection.scale == pytest.approx(50.0)
        assert projection.to_screen(1.0, 0.0) == (0, 25)
        assert projection.to_screen(0.0, 2.0) == (100, 75)

    @pytest.mark.unit
    def test_rect_offset(self):
        projection = MapProjection([(0.0, 0.0), (1.0, 1.0)], (20, 10, 100, 100), padding=0)
        assert projection.to_screen(1.0, 0.0) == (20, 10)

    @pytest.mark.unit
    def test_padding_shrinks_route(self):
        projection = MapProjection([(0.0, 0.0), (1.0, 1.0)], (0, 0, 120, 120), padding=0.1)
        x, y = projection.to_screen(1.0, 0.0)
        assert x == 10
        assert y == 10

    @pytest.mark.unit
    def test_horizontal_route(self):
        """Test a route with no latitude span still projects to the middle row."""
        projection = MapProjection([(0.0, 0.0), (0.0, 2.0)], (0, 0, 100, 100), padding=0)
        assert projection.to_screen(0.0, 1.0) == (50, 50)

    @pytest.mark.unit
    def test_single_point_centred(self):
        projection = MapProjection([(5.0, 5.0)], (0, 0, 100, 100))
        assert projection.to_screen(5.0, 5.0) == (50, 50)

    @pytest.mark.unit
    def test_empty_coordinates(self):
        projection = MapProjection([], (0, 0, 100, 100))
        assert projection.project([]).shape == (0, 2)

    @pytest.mark.unit
    def test_project_matches_to_screen(self):
        coords = [(0.0, 0.0), (0.5, 0.25), (1.0, 1.0)]
        projection = MapProjection(coords, (0, 0, 200, 100))
        pixels = projection.project(coords)
        assert pixels.shape == (3, 2)
        assert np.issubdtype(pixels.dtype, np.integer)
        assert [tuple(p) for p in pixels] == [projection.to_screen(*c) for c in coords]

    @pytest.mark.unit
    def test_follow_centre(self):
        projection = MapProjection([(0.0, 0.0), (1.0, 1.0)], (0, 0, 100, 100), padding=0)
        projection.follow_centre = (0.0, 0.0)
        assert projection.to_screen(0.0, 0.0) == (50, 50)
        assert projection.to_screen(1.0, 1.0) == (150, -50)
        projection.follow_centre = None
        assert projection.to_screen(0.0, 0.0) == (0, 100)


class TestMarkerPolygon:
    """Tests for the directional vehicle marker."""

    @pytest.mark.unit
    def test_points_north(self):
        tip, left, right = marker_polygon((50, 50), 0.0, size=10)
        assert tip == pytest.approx((50, 40))
        # Base sits behind the centre
        assert left[1] > 50 and right[1] > 50

    @pytest.mark.unit
    def test_points_east(self):
        tip, _, _ = marker_polygon((50, 50), 90.0, size=10)
        assert tip == pytest.approx((60, 50))

    @pytest.mark.unit
    def test_points_west(self):
        tip, _, _ = marker_polygon((0, 0), -90.0, size=10)
        assert tip == pytest.approx((-10, 0))

    @pytest.mark.unit
    def test_symmetric_base(self):
        centre = (0, 0)
        tip, left, right = marker_polygon(centre, 33.0, size=12)
        assert math.dist(tip, left) == pytest.approx(math.dist(tip, right))


class TestDashedSegments:
    """Tests for splitting the background route into dashes."""

    @pytest.mark.unit
    def test_straight_line(self):
        segments = dashed_segments(np.array([[0, 0], [20, 0]]), dash_px=5)
        assert len(segments) == 2
        assert segments[0] == ((0.0, 0.0), (5.0, 0.0))
        assert segments[1] == ((10.0, 0.0), (15.0, 0.0))

    @pytest.mark.unit
    def test_dash_carries_round_corner(self):
        segments = dashed_segments(np.array([[0, 0], [3, 0], [3, 4]]), dash_px=5)
        assert len(segments) == 2
        drawn = sum(math.dist(a, b) for a, b in segments)
        assert drawn == pytest.approx(5.0)

    @pytest.mark.unit
    def test_repeated_points_skipped(self):
        segments = dashed_segments(np.array([[0, 0], [0, 0], [0, 4]]), dash_px=5)
        assert segments == [((0.0, 0.0), (0.0, 4.0))]

    @pytest.mark.unit
    def test_too_few_points(self):
        assert dashed_segments(np.zeros((0, 2))) == []
        assert dashed_segments(np.array([[1, 1]])) == []


class TestRouteDisplay:
    """Smoke tests drawing onto an off-screen surface."""

    @pytest.fixture
    def pygame_fonts(self):
        os.environ.setdefault('SDL_VIDEODRIVER', 'dummy')
        pygame = pytest.importorskip('pygame')
        pygame.font.init()
        yield pygame
        pygame.font.quit()

    @pytest.mark.unit
    def test_toggle_follow(self, pygame_fonts):
        display = RouteDisplay(800, 480, follow_vehicle=True)
        assert display.toggle_follow() is False
        assert display.toggle_follow() is True

    @pytest.mark.unit
    def test_draw_with_presenter(self, pygame_fonts, city_route, scheduler, clock):
        from playback import PlaybackEngine, PlaybackPresenter

        engine = PlaybackEngine(city_route, scheduler=scheduler, tick_interval_s=1.0, clock=clock)
        presenter = PlaybackPresenter(engine)
        engine.play()
        clock.advance(1.0)
        scheduler.run_due()

        screen = pygame_fonts.Surface((800, 480))
        display = RouteDisplay(800, 480)
        display.draw(screen, presenter)
        # Projection is cached for the same route
        first = display._projection
        display.draw(screen, presenter)
        assert display._projection is first

    @pytest.mark.unit
    def test_draw_without_route(self, pygame_fonts):
        screen = pygame_fonts.Surface((800, 480))
        RouteDisplay(800, 480).draw(screen, None)
