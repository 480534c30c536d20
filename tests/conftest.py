"""
Shared pytest fixtures for routeplay tests.
"""

import os
import sys
import pytest
import tempfile
import json

# Add project root to path for imports
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from playback.scheduler import PollingScheduler
from tests.fixtures.route_test_data import CITY_DRIVE, EQUATOR_ROUTE, FakeClock, make_route


@pytest.fixture
def clock():
    """Fake clock starting at t=100s."""
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    """Polling scheduler driven by the fake clock."""
    return PollingScheduler(clock)


@pytest.fixture
def equator_route():
    """Two samples 1 degree of longitude and 1 hour apart on the equator."""
    return make_route(EQUATOR_ROUTE)


@pytest.fixture
def city_route():
    """Five sample city drive, 15 s between samples."""
    return make_route(CITY_DRIVE)


@pytest.fixture
def route_json_file(tmp_path):
    """Write sample dicts to a .json file and return its path."""
    def _write(samples, name='route.json'):
        path = tmp_path / name
        path.write_text(json.dumps(samples), encoding='utf-8')
        return str(path)
    return _write


@pytest.fixture
def temp_settings_file():
    """Create a temporary settings file for testing SettingsManager."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        f.write('{}')
        temp_path = f.name
    yield temp_path
    # Cleanup
    if os.path.exists(temp_path):
        os.remove(temp_path)


@pytest.fixture
def temp_settings_with_data():
    """Create a temporary settings file with pre-populated data."""
    test_data = {
        "playback": {
            "tick_interval_s": 0.5
        },
        "display": {
            "follow_vehicle": False,
            "width": 1280,
            "height": 720
        }
    }
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump(test_data, f)
        temp_path = f.name
    yield temp_path
    # Cleanup
    if os.path.exists(temp_path):
        os.remove(temp_path)
