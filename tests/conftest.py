import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from timesync import create_app  # noqa: E402
from timesync.routes.level_api import _level_cache, _level_cache_lock  # noqa: E402

_TUNABLE_ENV = (
    "TIMESYNC_MAX_ATTEMPTS",
    "TIMESYNC_MAX_SEARCH_STATES",
    "TIMESYNC_ENABLE_GENERATION_METRICS",
    "TIMESYNC_DISABLE_CACHE",
    "TIMESYNC_LOG_JSON",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep developer shell / .env tunables from leaking into assertions."""
    for name in _TUNABLE_ENV:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture()
def test_app():
    # Small budgets keep request-level generation quick; the fallback room
    # still guarantees a playable response.
    return create_app(
        {
            "TESTING": True,
            "TIMESYNC_MAX_ATTEMPTS": 25,
            "TIMESYNC_MAX_SEARCH_STATES": 10_000,
            "TIMESYNC_ENABLE_GENERATION_METRICS": True,
        }
    )


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture(autouse=True)
def _clear_level_cache():
    """Ensure cached levels don't leak between tests."""
    with _level_cache_lock:
        _level_cache.clear()
    yield
    with _level_cache_lock:
        _level_cache.clear()
