"""
Configuration settings for routeplay.
Contains constants for playback, display and map styling.

Organised into logical sections:
1. Paths (assets, default route)
2. Playback (tick cadence, kinematics)
3. Display & UI (resolution, colours, fonts, layout)
4. Map view (route styling, vehicle marker)
"""

import os

# ==============================================================================
# APPLICATION VERSION
# ==============================================================================
APP_VERSION = "0.3.0"

# ==============================================================================
# PATHS
# ==============================================================================
_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# Bundled assets directory (read-only, shipped with application)
BUNDLED_ASSETS_DIR = os.path.join(_PROJECT_ROOT, "assets")

# Route replayed when none is given on the command line
DEFAULT_ROUTE_FILE = os.path.join(BUNDLED_ASSETS_DIR, "sample_route.json")

# User preferences file (see utils/settings.py)
SETTINGS_FILE = os.path.expanduser("~/.routeplay_settings.json")

# ==============================================================================
# PLAYBACK
# ==============================================================================
# Seconds between two playback ticks (one sample per tick)
TICK_INTERVAL_S = 1.5

# Lower bound for user supplied intervals, keeps the loop responsive
MIN_TICK_INTERVAL_S = 0.05

# Mean Earth radius used by the haversine formula
EARTH_RADIUS_KM = 6371.0

# Headless mode: how long to sleep when no tick is pending
HEADLESS_IDLE_SLEEP_S = 0.1

# ==============================================================================
# DISPLAY & UI
# ==============================================================================
DISPLAY_WIDTH = 1024
DISPLAY_HEIGHT = 600
FPS_TARGET = 30
WINDOW_TITLE = "Vehicle Tracker"

# Side panel with vehicle status (right hand side)
PANEL_WIDTH = 300
PANEL_PADDING = 16

# Font settings (None uses pygame's default font)
FONT_PATH = None
FONT_SIZE_LARGE = 32
FONT_SIZE_MEDIUM = 24
FONT_SIZE_SMALL = 18

# Colours (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GREY = (128, 128, 128)
LIGHT_GREY = (209, 213, 219)
DARK_GREY = (55, 65, 81)
BLUE = (59, 130, 246)
GREEN = (22, 163, 74)
RED = (220, 38, 38)
BACKGROUND = (243, 244, 246)
PANEL_BACKGROUND = WHITE

# ==============================================================================
# MAP VIEW
# ==============================================================================
# Fraction of the route extent added around it when fitting to the window
MAP_PADDING = 0.05

# Full route: light grey dashed line
ROUTE_COLOUR = LIGHT_GREY
ROUTE_WIDTH = 3
ROUTE_DASH_PX = 5

# Completed part of the route
COMPLETED_COLOUR = BLUE
COMPLETED_WIDTH = 4

# Vehicle marker (triangle pointing along the bearing)
MARKER_COLOUR = RED
MARKER_OUTLINE = WHITE
MARKER_SIZE = 14

# Keep the vehicle centred while playing
FOLLOW_VEHICLE = True
