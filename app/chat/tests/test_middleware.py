"""
Tests for websocket handshake authentication.

Features tested:
- Credential sources: auth cookie first, then ?token= query parameter
- Failure reasons preserved as error codes
- Outcome recorded in the scope for the consumer
"""

import time
import uuid

import jwt
import pytest
from django.conf import settings

from authentication.tokens import AuthErrorCode, JWTCredentialVerifier
from chat.middleware import ConnectionAuthenticator, JWTAuthMiddleware
from core.exceptions import AuthenticationError

USER_ID = str(uuid.uuid4())


def _token(key=None, **overrides):
    claims = {
        "token_type": "access",
        "user_id": USER_ID,
        "username": "ada",
        "name": "Ada",
        "avatar": "",
        "provider": "discord",
        "upstream_token": "upstream",
        "exp": int(time.time()) + 3600,
    }
    claims.update(overrides)
    return jwt.encode(
        claims, key or settings.SIMPLE_JWT["SIGNING_KEY"], algorithm="HS256"
    )


def _scope(cookie=None, query=b""):
    headers = [(b"host", b"testserver")]
    if cookie is not None:
        headers.append((b"cookie", cookie.encode()))
    return {
        "type": "websocket",
        "path": "/ws/chat/",
        "headers": headers,
        "query_string": query,
    }


@pytest.fixture
def authenticator():
    return ConnectionAuthenticator(JWTCredentialVerifier.from_settings())


# =============================================================================
# ConnectionAuthenticator
# =============================================================================


class TestConnectionAuthenticator:
    """Test token extraction and verification."""

    def test_cookie_credential(self, authenticator):
        identity = authenticator.authenticate(_scope(cookie=f"auth={_token()}"))

        assert identity.id == USER_ID
        assert identity.username == "ada"
        assert identity.provider == "discord"

    def test_cookie_among_others(self, authenticator):
        cookie = f"theme=dark; auth={_token()}; lang=en"

        assert authenticator.authenticate(_scope(cookie=cookie)).id == USER_ID

    def test_query_credential(self, authenticator):
        identity = authenticator.authenticate(
            _scope(query=f"token={_token()}".encode())
        )

        assert identity.id == USER_ID

    def test_cookie_takes_precedence_over_query(self, authenticator):
        """
        Given: A valid cookie and a forged query token
        When: Authenticating
        Then: The cookie wins
        """
        forged = _token(key="some-other-key-that-is-long-enough-for-hs256")
        scope = _scope(cookie=f"auth={_token()}", query=f"token={forged}".encode())

        assert authenticator.authenticate(scope).id == USER_ID

    def test_custom_cookie_name(self):
        authenticator = ConnectionAuthenticator(
            JWTCredentialVerifier.from_settings(), cookie_name="session_jwt"
        )

        identity = authenticator.authenticate(_scope(cookie=f"session_jwt={_token()}"))

        assert identity.id == USER_ID

    @pytest.mark.parametrize(
        "scope,code",
        [
            (_scope(), AuthErrorCode.MISSING_CREDENTIAL),
            (_scope(cookie="auth="), AuthErrorCode.MISSING_CREDENTIAL),
            (_scope(cookie="other=value"), AuthErrorCode.MISSING_CREDENTIAL),
            (_scope(cookie="auth=garbage"), AuthErrorCode.MALFORMED_CREDENTIAL),
            (_scope(query=b"token=a.b.c"), AuthErrorCode.MALFORMED_CREDENTIAL),
        ],
    )
    def test_rejections(self, authenticator, scope, code):
        with pytest.raises(AuthenticationError) as exc_info:
            authenticator.authenticate(scope)

        assert exc_info.value.error_code == code

    def test_expired(self, authenticator):
        token = _token(exp=int(time.time()) - 10)

        with pytest.raises(AuthenticationError) as exc_info:
            authenticator.authenticate(_scope(cookie=f"auth={token}"))

        assert exc_info.value.error_code == AuthErrorCode.TOKEN_EXPIRED

    def test_forged_signature(self, authenticator):
        token = _token(key="attacker-key-that-is-also-long-enough-for-hs256")

        with pytest.raises(AuthenticationError) as exc_info:
            authenticator.authenticate(_scope(cookie=f"auth={token}"))

        assert exc_info.value.error_code == AuthErrorCode.INVALID_SIGNATURE

    def test_missing_identity_claim(self, authenticator):
        token = _token(username="")

        with pytest.raises(AuthenticationError) as exc_info:
            authenticator.authenticate(_scope(cookie=f"auth={token}"))

        assert exc_info.value.error_code == AuthErrorCode.INVALID_PAYLOAD


# =============================================================================
# JWTAuthMiddleware
# =============================================================================


@pytest.mark.asyncio
class TestJWTAuthMiddleware:
    """The middleware records the outcome and always calls the inner app."""

    @staticmethod
    def _capturing_app():
        captured = {}

        async def inner(scope, receive, send):
            captured["scope"] = scope

        return inner, captured

    async def test_success_sets_identity(self):
        inner, captured = self._capturing_app()
        middleware = JWTAuthMiddleware(inner)

        await middleware(_scope(cookie=f"auth={_token()}"), None, None)

        assert captured["scope"]["identity"].id == USER_ID
        assert captured["scope"]["auth_error"] is None

    async def test_failure_sets_error(self):
        inner, captured = self._capturing_app()
        middleware = JWTAuthMiddleware(inner)

        await middleware(_scope(), None, None)

        assert captured["scope"]["identity"] is None
        error = captured["scope"]["auth_error"]
        assert error.error_code == AuthErrorCode.MISSING_CREDENTIAL

    async def test_original_scope_untouched(self):
        inner, _ = self._capturing_app()
        scope = _scope(cookie=f"auth={_token()}")

        await JWTAuthMiddleware(inner)(scope, None, None)

        assert "identity" not in scope

    async def test_injected_authenticator(self, authenticator):
        inner, captured = self._capturing_app()
        middleware = JWTAuthMiddleware(inner, authenticator=authenticator)

        await middleware(_scope(query=f"token={_token()}".encode()), None, None)

        assert middleware.authenticator is authenticator
        assert captured["scope"]["identity"].id == USER_ID
