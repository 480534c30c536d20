"""
Core application modules for routeplay.

This package provides mixin classes that compose the RoutePlayer application.
"""

from core.event_handlers import EventHandlerMixin

__all__ = [
    'EventHandlerMixin',
]
