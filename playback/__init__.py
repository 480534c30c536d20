"""
Route playback

Replays a recorded route of timestamped positions, one sample per tick,
deriving speed, bearing, elapsed time and progress for a map renderer.
"""

from .models import Route, RoutePoint, PlaybackState, RenderFrame
from .engine import PlaybackEngine
from .scheduler import PollingScheduler, ScheduledCall
from .route_loader import RouteLoader, RouteLoadError, parse_route_data
from .presenter import PlaybackPresenter

__all__ = [
    'Route',
    'RoutePoint',
    'PlaybackState',
    'RenderFrame',
    'PlaybackEngine',
    'PollingScheduler',
    'ScheduledCall',
    'RouteLoader',
    'RouteLoadError',
    'parse_route_data',
    'PlaybackPresenter',
]
