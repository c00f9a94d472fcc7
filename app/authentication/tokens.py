"""
Signed credentials and the identities they carry.

The OAuth callback (outside this service) signs an access token with
simplejwt and stores it in the ``auth`` cookie. Every realtime connection and
REST request presents that token; this module turns it back into an
immutable Identity or raises AuthenticationError with a distinct reason.

Classes:
    Identity: Authenticated principal bound to a connection for its lifetime
    JWTCredentialVerifier: Signature/expiry verification with PyJWT

Functions:
    issue_access_token: Sign an access token carrying identity claims

Failure codes:
    AUTH_MISSING_CREDENTIAL: No token presented
    AUTH_MALFORMED_CREDENTIAL: Token is not a decodable JWT
    AUTH_INVALID_SIGNATURE: Signature does not match the signing key
    AUTH_TOKEN_EXPIRED: ``exp`` claim is in the past
    AUTH_INVALID_PAYLOAD: Claims are missing or have the wrong shape

Usage:
    verifier = JWTCredentialVerifier.from_settings()
    identity = verifier.verify(raw_token)
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import jwt
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from authentication.models import AuthProvider
from core.exceptions import AuthenticationError

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User

logger = logging.getLogger(__name__)


class AuthErrorCode:
    """Machine-readable authentication failure reasons."""

    MISSING_CREDENTIAL = "AUTH_MISSING_CREDENTIAL"
    MALFORMED_CREDENTIAL = "AUTH_MALFORMED_CREDENTIAL"
    INVALID_SIGNATURE = "AUTH_INVALID_SIGNATURE"
    TOKEN_EXPIRED = "AUTH_TOKEN_EXPIRED"
    INVALID_PAYLOAD = "AUTH_INVALID_PAYLOAD"


@dataclass(frozen=True)
class Identity:
    """
    Authenticated principal derived from a verified token.

    Immutable: a connection keeps the identity it was admitted with.

    Attributes:
        id: User id (UUID string)
        username: Unique handle
        name: Display name (may be empty)
        avatar: Avatar URL (may be empty)
        provider: OAuth provider type
        upstream_token: Opaque provider token
        expires_at: When the backing credential expires
    """

    id: str
    username: str
    name: str
    avatar: str
    provider: str
    upstream_token: str
    expires_at: datetime

    @classmethod
    def from_claims(
        cls, claims: dict[str, Any], user_id_claim: str = "user_id"
    ) -> Identity:
        """
        Build an Identity from decoded JWT claims.

        Raises:
            AuthenticationError: If a required claim is missing or malformed
        """
        raw_id = claims.get(user_id_claim)
        try:
            user_id = str(uuid.UUID(str(raw_id)))
        except (TypeError, ValueError, AttributeError):
            raise AuthenticationError(
                "Authentication token payload is invalid",
                error_code=AuthErrorCode.INVALID_PAYLOAD,
                details={"claim": user_id_claim},
            )

        username = claims.get("username")
        if not isinstance(username, str) or not username:
            raise AuthenticationError(
                "Authentication token payload is invalid",
                error_code=AuthErrorCode.INVALID_PAYLOAD,
                details={"claim": "username"},
            )

        provider = claims.get("provider")
        if provider not in AuthProvider.values:
            raise AuthenticationError(
                "Authentication token payload is invalid",
                error_code=AuthErrorCode.INVALID_PAYLOAD,
                details={"claim": "provider"},
            )

        optional = {}
        for claim in ("name", "avatar", "upstream_token"):
            value = claims.get(claim) or ""
            if not isinstance(value, str):
                raise AuthenticationError(
                    "Authentication token payload is invalid",
                    error_code=AuthErrorCode.INVALID_PAYLOAD,
                    details={"claim": claim},
                )
            optional[claim] = value

        exp = claims.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise AuthenticationError(
                "Authentication token payload is invalid",
                error_code=AuthErrorCode.INVALID_PAYLOAD,
                details={"claim": "exp"},
            )

        return cls(
            id=user_id,
            username=username,
            provider=provider,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            **optional,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the credential this identity came from has expired."""
        now = now or datetime.now(tz=timezone.utc)
        return now >= self.expires_at


class JWTCredentialVerifier:
    """
    Verify signed access tokens and decode them into identities.

    Uses the same signing key and algorithm simplejwt issues tokens with,
    but verifies with PyJWT directly so that each failure keeps its own
    reason code.

    Args:
        signing_key: HMAC secret or public key
        algorithm: JWT algorithm (e.g. "HS256")
        leeway: Clock skew tolerance
        user_id_claim: Claim carrying the user id
    """

    def __init__(
        self,
        signing_key: str,
        algorithm: str = "HS256",
        leeway: timedelta | int = 0,
        user_id_claim: str = "user_id",
    ):
        self.signing_key = signing_key
        self.algorithm = algorithm
        self.leeway = leeway
        self.user_id_claim = user_id_claim

    @classmethod
    def from_settings(cls) -> JWTCredentialVerifier:
        """Build a verifier from the project's SIMPLE_JWT settings."""
        verifying_key = api_settings.VERIFYING_KEY or api_settings.SIGNING_KEY
        return cls(
            signing_key=verifying_key,
            algorithm=api_settings.ALGORITHM,
            leeway=api_settings.LEEWAY,
            user_id_claim=api_settings.USER_ID_CLAIM,
        )

    def decode(self, token: str | None) -> dict[str, Any]:
        """
        Verify signature and expiry and return the raw claims.

        Raises:
            AuthenticationError: With a reason-specific error_code
        """
        if not token:
            raise AuthenticationError(
                "No authentication credential provided",
                error_code=AuthErrorCode.MISSING_CREDENTIAL,
            )

        try:
            return jwt.decode(
                token,
                self.signing_key,
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError(
                "Authentication token has expired",
                error_code=AuthErrorCode.TOKEN_EXPIRED,
            )
        except jwt.InvalidSignatureError:
            raise AuthenticationError(
                "Authentication token signature is invalid",
                error_code=AuthErrorCode.INVALID_SIGNATURE,
            )
        except jwt.DecodeError:
            raise AuthenticationError(
                "Authentication token is malformed",
                error_code=AuthErrorCode.MALFORMED_CREDENTIAL,
            )
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(
                "Authentication token payload is invalid",
                error_code=AuthErrorCode.INVALID_PAYLOAD,
                details={"reason": str(e)},
            )

    def verify(self, token: str | None) -> Identity:
        """
        Verify a token and return the identity it carries.

        Raises:
            AuthenticationError: Missing, malformed, forged, expired or
                structurally invalid credential
        """
        claims = self.decode(token)
        return Identity.from_claims(claims, self.user_id_claim)


def issue_access_token(user: User, lifetime: timedelta | None = None) -> str:
    """
    Sign an access token for a user, embedding the identity claims.

    Called by the OAuth callback once the provider handshake succeeded, and
    by tests.

    Args:
        user: The user to issue a token for
        lifetime: Override for ACCESS_TOKEN_LIFETIME

    Returns:
        Encoded JWT suitable for the ``auth`` cookie
    """
    token = AccessToken.for_user(user)
    if lifetime is not None:
        token.set_exp(lifetime=lifetime)

    token["username"] = user.username
    token["name"] = user.name
    token["avatar"] = user.avatar
    token["provider"] = user.provider
    token["upstream_token"] = user.upstream_token

    logger.debug(f"Issued access token for user {user.id}")
    return str(token)
