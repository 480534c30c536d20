"""
Route display for routeplay.
Draws the map view (full route, completed path, vehicle marker) and the
side panel with vehicle status, progress and route summary.
"""

import logging
import math
from typing import Optional, Sequence, Tuple

import numpy as np
import pygame

from config import (
    BACKGROUND,
    PANEL_BACKGROUND,
    PANEL_WIDTH,
    PANEL_PADDING,
    BLACK,
    GREY,
    DARK_GREY,
    BLUE,
    GREEN,
    LIGHT_GREY,
    FONT_PATH,
    FONT_SIZE_LARGE,
    FONT_SIZE_MEDIUM,
    FONT_SIZE_SMALL,
    MAP_PADDING,
    ROUTE_COLOUR,
    ROUTE_WIDTH,
    ROUTE_DASH_PX,
    COMPLETED_COLOUR,
    COMPLETED_WIDTH,
    MARKER_COLOUR,
    MARKER_OUTLINE,
    MARKER_SIZE,
)

logger = logging.getLogger('routeplay.route_display')

Rect = Tuple[int, int, int, int]


class MapProjection:
    """
    Fits a set of coordinates into a screen rectangle.

    Equirectangular: longitude maps to x, latitude to y (flipped), one scale
    for both axes so the route keeps its aspect ratio. When a follow centre
    is set, the view is shifted so that coordinate sits in the middle of the
    rectangle while keeping the fitted scale.
    """

    def __init__(self, coordinates: Sequence[Tuple[float, float]], rect: Rect, padding: float = MAP_PADDING):
        self.rect = rect
        self.follow_centre: Optional[Tuple[float, float]] = None

        left, top, width, height = rect
        coords = np.asarray(coordinates, dtype=float).reshape(-1, 2)

        if len(coords) == 0:
            self.min_lat = self.max_lat = 0.0
            self.min_lon = self.max_lon = 0.0
        else:
            self.min_lat, self.min_lon = coords.min(axis=0)
            self.max_lat, self.max_lon = coords.max(axis=0)

        lat_range = self.max_lat - self.min_lat
        lon_range = self.max_lon - self.min_lon
        self.min_lat -= lat_range * padding
        self.max_lat += lat_range * padding
        self.min_lon -= lon_range * padding
        self.max_lon += lon_range * padding
        lat_range = self.max_lat - self.min_lat
        lon_range = self.max_lon - self.min_lon

        # Calculate scale to fit route in map area (maintain aspect ratio)
        scale_x = width / lon_range if lon_range > 0 else None
        scale_y = height / lat_range if lat_range > 0 else None
        scales = [s for s in (scale_x, scale_y) if s is not None]
        self.scale = min(scales) if scales else 1.0

        # Centre offset
        self.offset_x = left + (width - lon_range * self.scale) / 2
        self.offset_y = top + (height - lat_range * self.scale) / 2

    def _shift(self) -> Tuple[float, float]:
        if self.follow_centre is None:
            return 0.0, 0.0
        left, top, width, height = self.rect
        cx, cy = self._raw(*self.follow_centre)
        return left + width / 2 - cx, top + height / 2 - cy

    def _raw(self, lat: float, lon: float) -> Tuple[float, float]:
        x = self.offset_x + (lon - self.min_lon) * self.scale
        y = self.offset_y + (self.max_lat - lat) * self.scale  # Flip Y axis
        return x, y

    def to_screen(self, lat: float, lon: float) -> Tuple[int, int]:
        """Convert lat/lon to screen coordinates."""
        x, y = self._raw(lat, lon)
        dx, dy = self._shift()
        return int(round(x + dx)), int(round(y + dy))

    def project(self, coordinates: Sequence[Tuple[float, float]]) -> np.ndarray:
        """Convert a sequence of (lat, lon) to an (N, 2) int array of pixels."""
        coords = np.asarray(coordinates, dtype=float).reshape(-1, 2)
        dx, dy = self._shift()
        xs = self.offset_x + (coords[:, 1] - self.min_lon) * self.scale + dx
        ys = self.offset_y + (self.max_lat - coords[:, 0]) * self.scale + dy
        return np.rint(np.column_stack((xs, ys))).astype(int)


def marker_polygon(centre: Tuple[int, int], bearing_deg: float, size: float = MARKER_SIZE):
    """
    Triangle pointing along the bearing (0 = up/north, 90 = right/east).

    Returns:
        List of three (x, y) points, tip first
    """
    rad = math.radians(bearing_deg)
    # Screen y grows downward
    fx, fy = math.sin(rad), -math.cos(rad)
    px, py = -fy, fx
    cx, cy = centre
    tip = (cx + fx * size, cy + fy * size)
    left = (cx - fx * size * 0.6 + px * size * 0.6, cy - fy * size * 0.6 + py * size * 0.6)
    right = (cx - fx * size * 0.6 - px * size * 0.6, cy - fy * size * 0.6 - py * size * 0.6)
    return [tip, left, right]


def dashed_segments(points: np.ndarray, dash_px: float = ROUTE_DASH_PX):
    """
    Split a polyline into alternating dash segments.

    Returns:
        List of ((x1, y1), (x2, y2)) segments to draw
    """
    segments = []
    draw = True
    carry = 0.0
    for i in range(1, len(points)):
        start = points[i - 1].astype(float)
        end = points[i].astype(float)
        vector = end - start
        length = float(np.hypot(*vector))
        if length == 0:
            continue
        direction = vector / length
        pos = 0.0
        while pos < length:
            step = min(dash_px - carry, length - pos)
            if draw:
                a = start + direction * pos
                b = start + direction * (pos + step)
                segments.append(((a[0], a[1]), (b[0], b[1])))
            pos += step
            carry += step
            if carry >= dash_px:
                carry = 0.0
                draw = not draw
    return segments


class RouteDisplay:
    """Map view with vehicle marker plus vehicle status side panel."""

    def __init__(self, width: int, height: int, follow_vehicle: bool = True):
        """
        Initialise the route display.

        Args:
            width: Window width in pixels
            height: Window height in pixels
            follow_vehicle: Centre the map on the vehicle while playing
        """
        self.width = width
        self.height = height
        self.follow_vehicle = follow_vehicle
        self.map_rect: Rect = (0, 0, max(1, width - PANEL_WIDTH), height)

        try:
            self.font_large = pygame.font.Font(FONT_PATH, FONT_SIZE_LARGE)
            self.font_medium = pygame.font.Font(FONT_PATH, FONT_SIZE_MEDIUM)
            self.font_small = pygame.font.Font(FONT_PATH, FONT_SIZE_SMALL)
        except (pygame.error, FileNotFoundError, OSError) as e:
            logger.warning("Error loading fonts: %s", e)
            self.font_large = pygame.font.SysFont("monospace", FONT_SIZE_LARGE)
            self.font_medium = pygame.font.SysFont("monospace", FONT_SIZE_MEDIUM)
            self.font_small = pygame.font.SysFont("monospace", FONT_SIZE_SMALL)

        # Background route is static, cached per route
        self._projection: Optional[MapProjection] = None
        self._projected_for = None

    def toggle_follow(self) -> bool:
        self.follow_vehicle = not self.follow_vehicle
        logger.debug("Follow vehicle: %s", self.follow_vehicle)
        return self.follow_vehicle

    def _projection_for(self, full_path) -> MapProjection:
        if self._projection is None or self._projected_for is not full_path:
            self._projection = MapProjection(full_path, self.map_rect)
            self._projected_for = full_path
        return self._projection

    def draw(self, screen, presenter):
        """
        Draw the full window.

        Args:
            screen: Pygame surface to draw on
            presenter: PlaybackPresenter with the latest frame and panel
        """
        screen.fill(BACKGROUND)

        if presenter is None or not presenter.full_path:
            self._draw_loading(screen, presenter)
        else:
            self._draw_map(screen, presenter.full_path, presenter.frame)

        self._draw_panel(screen, presenter.panel if presenter else None)

    def _draw_loading(self, screen, presenter):
        text = "Loading route..." if presenter is None else "No data available"
        surface = self.font_medium.render(text, True, GREY)
        _, _, w, h = self.map_rect
        screen.blit(surface, surface.get_rect(center=(w // 2, h // 2)))

    def _draw_map(self, screen, full_path, frame):
        projection = self._projection_for(full_path)
        follow = self.follow_vehicle and frame.is_playing and frame.current is not None
        projection.follow_centre = frame.current if follow else None

        clip = screen.get_clip()
        screen.set_clip(pygame.Rect(self.map_rect))

        route_px = projection.project(full_path)
        for a, b in dashed_segments(route_px):
            pygame.draw.line(screen, ROUTE_COLOUR, a, b, ROUTE_WIDTH)

        if len(frame.completed_path) > 1:
            done_px = [(int(x), int(y)) for x, y in projection.project(frame.completed_path)]
            pygame.draw.lines(screen, COMPLETED_COLOUR, False, done_px, COMPLETED_WIDTH)

        if frame.current is not None:
            centre = projection.to_screen(*frame.current)
            triangle = marker_polygon(centre, frame.bearing_degrees)
            pygame.draw.polygon(screen, MARKER_COLOUR, triangle)
            pygame.draw.polygon(screen, MARKER_OUTLINE, triangle, 2)

        screen.set_clip(clip)

    def _draw_panel(self, screen, panel):
        left = self.width - PANEL_WIDTH
        pygame.draw.rect(screen, PANEL_BACKGROUND, (left, 0, PANEL_WIDTH, self.height))
        pygame.draw.line(screen, LIGHT_GREY, (left, 0), (left, self.height), 1)

        x = left + PANEL_PADDING
        y = PANEL_PADDING

        y = self._blit(screen, "Vehicle Status", self.font_large, BLACK, x, y) + 8
        if panel is None or not panel.has_data:
            message = panel.message if panel else "Loading route..."
            self._blit(screen, message, self.font_small, GREY, x, y)
            return

        y = self._blit(screen, "Position", self.font_small, GREY, x, y)
        y = self._blit(screen, panel.latitude, self.font_medium, DARK_GREY, x, y)
        y = self._blit(screen, panel.longitude, self.font_medium, DARK_GREY, x, y) + 6
        y = self._blit(screen, "Timestamp", self.font_small, GREY, x, y)
        y = self._blit(screen, panel.timestamp, self.font_small, DARK_GREY, x, y) + 6
        y = self._blit(screen, "Speed", self.font_small, GREY, x, y)
        y = self._blit(screen, panel.speed, self.font_large, BLUE, x, y) + 6
        y = self._blit(screen, "Elapsed Time", self.font_small, GREY, x, y)
        y = self._blit(screen, panel.elapsed, self.font_large, GREEN, x, y) + 14

        # Route progress
        y = self._blit(screen, f"Progress  {panel.progress}", self.font_small, DARK_GREY, x, y) + 4
        bar_width = PANEL_WIDTH - 2 * PANEL_PADDING
        pygame.draw.rect(screen, LIGHT_GREY, (x, y, bar_width, 8), border_radius=4)
        filled = int(bar_width * max(0.0, min(1.0, panel.progress_fraction)))
        if filled > 0:
            pygame.draw.rect(screen, BLUE, (x, y, filled, 8), border_radius=4)
        y = self._blit(screen, panel.percent_complete, self.font_small, GREY, x, y + 12) + 14

        # Route summary
        y = self._blit(screen, f"Total Points: {panel.total_points}", self.font_small, DARK_GREY, x, y)
        status_colour = GREEN if panel.status == "Moving" else GREY
        self._blit(screen, f"Status: {panel.status}", self.font_small, status_colour, x, y)

    def _blit(self, screen, text, font, colour, x, y) -> int:
        surface = font.render(text, True, colour)
        screen.blit(surface, (x, y))
        return y + surface.get_height() + 2
