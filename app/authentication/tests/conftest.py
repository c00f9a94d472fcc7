"""
Test configuration and fixtures for authentication tests.

This module provides:
- User fixtures
- Signed credentials (valid, expired, forged)
- API client helpers for authenticated requests

Usage:
    def test_example(user, authenticated_client):
        response = authenticated_client.get("/api/v1/auth/me/")
        assert response.status_code == 200
"""

from datetime import timedelta

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from authentication.tokens import JWTCredentialVerifier, issue_access_token


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a basic active user."""
    return UserFactory()


@pytest.fixture
def deactivated_user(db):
    """Create a deactivated user (is_active=False)."""
    return UserFactory(is_active=False)


# =============================================================================
# Credential Fixtures
# =============================================================================


@pytest.fixture
def verifier():
    """Verifier configured from the test settings."""
    return JWTCredentialVerifier.from_settings()


@pytest.fixture
def access_token(user):
    """Valid signed access token for ``user``."""
    return issue_access_token(user)


@pytest.fixture
def expired_token(user):
    """Access token whose exp claim is already in the past."""
    return issue_access_token(user, lifetime=timedelta(seconds=-60))


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def authenticated_client(api_client, access_token, settings):
    """API client carrying the ``auth`` cookie."""
    api_client.cookies[settings.CHAT_AUTH_COOKIE_NAME] = access_token
    return api_client
