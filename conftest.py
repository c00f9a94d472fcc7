"""
Root pytest configuration for the Django project.

Sets the environment the settings module reads before Django is configured,
so the suite runs without Redis or a database server: SQLite for storage,
the in-memory channel layer and the in-memory presence registry.

App-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

import django

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault(
    "JWT_SIGNING_KEY", "test-jwt-signing-key-that-is-long-enough-for-hs256"
)
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("CHANNEL_LAYER_BACKEND", "memory")
os.environ.setdefault("CHAT_PRESENCE_BACKEND", "memory")
os.environ.setdefault("ENV_FILE", os.devnull)
# Test client speaks plain HTTP
os.environ.setdefault("SECURE_SSL_REDIRECT", "False")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()
