"""
WebSocket authentication middleware.

Verifies the handshake credential exactly once per connection, before the
consumer runs, and records the outcome in the scope:

    scope["identity"]    Identity on success, None on failure
    scope["auth_error"]  AuthenticationError on failure

The consumer decides what to do with a failure (send one error event and
close); the middleware never rejects the handshake itself, so the client
always learns why it was refused.

Related files:
    - routing.py: WebSocket URL patterns
    - consumers.py: WebSocket handlers
    - config/asgi.py: ASGI configuration

Token Passing Methods (in order of precedence):
    1. Cookie: auth=<jwt_token> (set by the OAuth callback)
    2. Query string: ws://host/ws/chat/?token=<jwt_token>

Usage in config/asgi.py:
    from chat.middleware import JWTAuthMiddleware

    application = ProtocolTypeRouter({
        "websocket": JWTAuthMiddleware(
            URLRouter(websocket_urlpatterns)
        ),
    })
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware
from django.conf import settings
from django.http.cookie import parse_cookie

from authentication.tokens import JWTCredentialVerifier
from chat.constants import REALTIME_CONFIG
from core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from authentication.tokens import Identity

logger = logging.getLogger(__name__)


class ConnectionAuthenticator:
    """
    Turn a websocket handshake scope into an Identity.

    Args:
        verifier: Credential verifier (injected, no module globals)
        cookie_name: Cookie carrying the credential

    Usage:
        authenticator = ConnectionAuthenticator(JWTCredentialVerifier.from_settings())
        identity = authenticator.authenticate(scope)
    """

    def __init__(self, verifier: JWTCredentialVerifier, cookie_name: str | None = None):
        self.verifier = verifier
        self.cookie_name = cookie_name or getattr(
            settings, "CHAT_AUTH_COOKIE_NAME", "auth"
        )

    def _get_token_from_cookie(self, scope) -> str | None:
        """Extract token from the raw ``cookie`` handshake header."""
        for name, value in scope.get("headers", []):
            if name == b"cookie":
                cookies = parse_cookie(value.decode("latin-1"))
                token = cookies.get(self.cookie_name)
                if token:
                    return token
        return None

    def _get_token_from_query(self, scope) -> str | None:
        """Extract token from query string."""
        query_string = scope.get("query_string", b"").decode()
        params = parse_qs(query_string)
        token_list = params.get(REALTIME_CONFIG.TOKEN_QUERY_PARAM, [])

        return token_list[0] if token_list else None

    def get_token(self, scope) -> str | None:
        return self._get_token_from_cookie(scope) or self._get_token_from_query(scope)

    def authenticate(self, scope) -> Identity:
        """
        Verify the handshake credential.

        Raises:
            AuthenticationError: Missing, malformed, forged, expired or
                structurally invalid credential
        """
        return self.verifier.verify(self.get_token(scope))


class JWTAuthMiddleware(BaseMiddleware):
    """
    JWT authentication middleware for WebSocket connections.

    Args:
        inner: Inner ASGI application
        authenticator: Defaults to one built from SIMPLE_JWT settings on
            first use
    """

    def __init__(self, inner, authenticator: ConnectionAuthenticator | None = None):
        super().__init__(inner)
        self._authenticator = authenticator

    @property
    def authenticator(self) -> ConnectionAuthenticator:
        if self._authenticator is None:
            self._authenticator = ConnectionAuthenticator(
                JWTCredentialVerifier.from_settings()
            )
        return self._authenticator

    async def __call__(self, scope, receive, send):
        """
        Process WebSocket connection.

        Authenticates the handshake and adds the outcome to the scope
        before passing to the inner application.
        """
        scope = dict(scope)
        try:
            identity = self.authenticator.authenticate(scope)
        except AuthenticationError as e:
            logger.warning(f"Rejected websocket credential: {e}")
            scope["identity"] = None
            scope["auth_error"] = e
        else:
            logger.debug(f"Authenticated websocket for user {identity.id}")
            scope["identity"] = identity
            scope["auth_error"] = None

        return await super().__call__(scope, receive, send)
