"""
Event handling mixin for routeplay.

Provides pygame event processing and maps keys to playback commands.
"""

import logging

import pygame

logger = logging.getLogger('routeplay.events')


class EventHandlerMixin:
    """
    Mixin providing event handling for the route player window.

    Expects the host class to provide ``running``, ``engine`` (PlaybackEngine)
    and ``display`` (RouteDisplay), plus ``settings`` for persisting the
    follow toggle.

    Keys:
        Space   Play / pause
        R       Reset
        F       Toggle follow vehicle
        Esc, Q  Quit
    """

    def _handle_events(self):
        """Handle pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)

    def _handle_key(self, key):
        """Dispatch a single key press."""
        # Exit on ESC or Q
        if key in (pygame.K_ESCAPE, pygame.K_q):
            self.running = False

        elif key == pygame.K_SPACE:
            if not self.engine.toggle():
                logger.debug("Play/pause ignored (empty route or end of route)")

        elif key == pygame.K_r:
            self.engine.reset()

        elif key == pygame.K_f:
            follow = self.display.toggle_follow()
            self.settings.set('display.follow_vehicle', follow)
