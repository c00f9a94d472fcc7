"""
DRF authentication backed by the ``auth`` cookie.

The browser client never sees the raw token: the OAuth callback sets it as
an HTTP-only cookie. API clients and tests may send the same token as a
Bearer header instead.

Related files:
    - tokens.py: JWTCredentialVerifier
    - services.py: UserService.get_active_user
"""

import logging

from django.conf import settings
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication, get_authorization_header

from authentication.services import UserService
from authentication.tokens import JWTCredentialVerifier
from core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class CookieJWTAuthentication(BaseAuthentication):
    """
    Authenticate requests from the ``auth`` cookie or a Bearer header.

    On success ``request.user`` is the User and ``request.auth`` is the
    verified Identity.
    """

    keyword = "Bearer"

    def __init__(self, verifier: JWTCredentialVerifier | None = None):
        self.verifier = verifier or JWTCredentialVerifier.from_settings()

    def get_raw_token(self, request) -> str | None:
        """Cookie first, then ``Authorization: Bearer <token>``."""
        cookie_name = getattr(settings, "CHAT_AUTH_COOKIE_NAME", "auth")
        token = request.COOKIES.get(cookie_name)
        if token:
            return token

        header = get_authorization_header(request).split()
        if not header or header[0].lower() != self.keyword.lower().encode():
            return None
        if len(header) != 2:
            raise exceptions.AuthenticationFailed(
                "Invalid Authorization header", code="AUTH_MALFORMED_CREDENTIAL"
            )
        return header[1].decode("latin-1")

    def authenticate(self, request):
        token = self.get_raw_token(request)
        if token is None:
            return None

        try:
            identity = self.verifier.verify(token)
        except AuthenticationError as e:
            logger.info(f"Rejected API credential: {e}")
            raise exceptions.AuthenticationFailed(e.message, code=e.error_code)

        user = UserService.get_active_user(identity.id)
        if user is None:
            raise exceptions.AuthenticationFailed(
                "User not found or inactive", code="AUTH_UNKNOWN_USER"
            )

        return user, identity

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'
