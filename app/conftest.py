"""
Shared pytest configuration for all apps.

Provides test-wide settings tweaks, automatic test categorisation and the
isolation fixtures every realtime test relies on.
"""

import pytest
from channels.layers import channel_layers

from chat.presence import get_presence_registry


def pytest_configure():
    """Apply test-only settings."""
    from django.conf import settings

    # Use fast password hasher for tests
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_consumers.py → e2e (full websocket journeys)
    - test_views.py, test_services.py, test_realtime.py, etc. → integration
    - test_models.py, test_tokens.py, test_ids.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_consumers.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_realtime.py",
        "test_middleware.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_managers.py",
        "test_tokens.py",
        "test_ids.py",
        "test_presence.py",
        "test_broadcast.py",
        "test_events.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def reset_realtime_state():
    """
    Start every test with an empty presence registry and channel layer.

    Both are process-wide singletons, so state would otherwise leak
    between tests.
    """
    get_presence_registry.cache_clear()
    channel_layers.backends.clear()
    yield
    get_presence_registry.cache_clear()
    channel_layers.backends.clear()
