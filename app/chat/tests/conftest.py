"""
Test configuration and fixtures for chat tests.

This module provides:
- Users and their signed credentials
- The websocket application stack
- API client helpers for authenticated requests

WebSocket tests must use ``@pytest.mark.django_db(transaction=True)``:
consumers reach the database from worker threads, which cannot see data
inside the per-test transaction of the plain ``db`` fixture.

Usage:
    @pytest.mark.asyncio
    @pytest.mark.django_db(transaction=True)
    async def test_example(ws_app, alice, alice_token):
        communicator = await open_socket(ws_app, alice_token)
        ...
        await communicator.disconnect()
"""

import pytest
from channels.routing import URLRouter
from django.conf import settings
from rest_framework.test import APIClient

from authentication.tests.factories import UserFactory
from authentication.tokens import issue_access_token
from chat.middleware import JWTAuthMiddleware
from chat.routing import websocket_urlpatterns


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def ws_app():
    """
    WebSocket stack without the origin validator.

    Communicators send no Origin header, which AllowedHostsOriginValidator
    rejects; everything below it is the production stack.
    """
    return JWTAuthMiddleware(URLRouter(websocket_urlpatterns))


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(username="alice")


@pytest.fixture
def bob(db):
    return UserFactory(username="bob")


@pytest.fixture
def carol(db):
    return UserFactory(username="carol")


@pytest.fixture
def alice_token(alice):
    return issue_access_token(alice)


@pytest.fixture
def bob_token(bob):
    return issue_access_token(bob)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def alice_client(alice_token):
    """API client carrying alice's ``auth`` cookie."""
    client = APIClient()
    client.cookies[settings.CHAT_AUTH_COOKIE_NAME] = alice_token
    return client


@pytest.fixture
def bob_client(bob_token):
    """API client carrying bob's ``auth`` cookie."""
    client = APIClient()
    client.cookies[settings.CHAT_AUTH_COOKIE_NAME] = bob_token
    return client
