"""
Persistent user preferences for routeplay.
Stores display and playback preferences in a JSON file that persists across
restarts. Playback position itself is never stored.

Settings file location:
    ~/.routeplay_settings.json (see config.SETTINGS_FILE)

Known keys:
    playback.tick_interval_s  Seconds between ticks
    display.follow_vehicle    Keep the vehicle centred while playing
    display.width             Window width in pixels
    display.height            Window height in pixels

If the settings file is corrupt (invalid JSON), it will be deleted and
defaults will be used. A warning is logged on startup in this case.
"""

import json
import logging
import math
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

from config import (
    SETTINGS_FILE,
    TICK_INTERVAL_S,
    MIN_TICK_INTERVAL_S,
    FOLLOW_VEHICLE,
    DISPLAY_WIDTH,
    DISPLAY_HEIGHT,
)

logger = logging.getLogger('routeplay.settings')


class SettingsManager:
    """
    Process-wide store for routeplay preferences.

    Read once from SETTINGS_FILE and written back on every set() unless
    save=False. Only preferences live here, never the playback position.
    """

    _instance: Optional['SettingsManager'] = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._initialised = False
                cls._instance = instance
        return cls._instance

    def __init__(self):
        if self._initialised:
            return

        self._settings = {}
        self._file_path = SETTINGS_FILE
        self._save_lock = threading.Lock()
        self._load()
        self._initialised = True

    def _load(self):
        """Read the settings file, falling back to an empty dict."""
        try:
            if os.path.exists(self._file_path):
                with open(self._file_path, 'r', encoding='utf-8') as f:
                    self._settings = json.load(f)
                logger.info("Settings loaded from %s", self._file_path)
            else:
                logger.debug("No settings file found, using defaults")
                self._settings = {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Corrupt settings file deleted, using defaults: %s", e)
            self._delete_corrupt_file()
            self._settings = {}
        except OSError as e:
            logger.warning("Could not load settings: %s", e)
            self._settings = {}

        if not isinstance(self._settings, dict):
            logger.warning("Settings file does not hold an object, using defaults")
            self._settings = {}

    def _delete_corrupt_file(self):
        try:
            if os.path.exists(self._file_path):
                os.remove(self._file_path)
                logger.info("Removed corrupt settings file: %s", self._file_path)
        except OSError as e:
            logger.error("Failed to remove corrupt settings file: %s", e)

    def _save(self):
        """Write settings through a temp file so a crash never truncates them."""
        with self._save_lock:
            temp_path = self._file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(self._settings, f, indent=2)
                os.replace(temp_path, self._file_path)
            except OSError as e:
                logger.warning("Could not save settings: %s", e)
                try:
                    if os.path.exists(temp_path):
                        os.remove(temp_path)
                except OSError:
                    pass

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            key: Setting key (dot notation for nested, e.g. "display.follow_vehicle")
            default: Default value if setting not found

        Returns:
            Setting value or default
        """
        value = self._settings

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any, save: bool = True):
        """
        Set a setting value.

        Args:
            key: Setting key (dot notation for nested)
            value: Value to set
            save: Whether to save to file immediately (default True)
        """
        keys = key.split('.')
        settings = self._settings

        # Walk down, replacing non-dict intermediates
        for k in keys[:-1]:
            if not isinstance(settings.get(k), dict):
                settings[k] = {}
            settings = settings[k]

        settings[keys[-1]] = value

        if save:
            self._save()


@dataclass(frozen=True)
class Preferences:
    """Resolved preferences: settings file values over config defaults."""
    tick_interval_s: float = TICK_INTERVAL_S
    follow_vehicle: bool = FOLLOW_VEHICLE
    width: int = DISPLAY_WIDTH
    height: int = DISPLAY_HEIGHT


def _number(value: Any, default: float, minimum: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return default
    if value < minimum:
        logger.warning("Setting value %s below minimum %s, using %s", value, minimum, minimum)
        return minimum
    return value


def load_preferences(manager: Optional[SettingsManager] = None) -> Preferences:
    """
    Resolve preferences from the settings file.

    Invalid or missing values fall back to the config defaults.
    """
    manager = manager if manager is not None else get_settings()
    follow = manager.get('display.follow_vehicle', FOLLOW_VEHICLE)
    return Preferences(
        tick_interval_s=float(_number(
            manager.get('playback.tick_interval_s'), TICK_INTERVAL_S, MIN_TICK_INTERVAL_S
        )),
        follow_vehicle=follow if isinstance(follow, bool) else FOLLOW_VEHICLE,
        width=int(_number(manager.get('display.width'), DISPLAY_WIDTH, 320)),
        height=int(_number(manager.get('display.height'), DISPLAY_HEIGHT, 240)),
    )


# Convenience function to get the singleton instance
def get_settings() -> SettingsManager:
    """Get the settings manager singleton."""
    return SettingsManager()
