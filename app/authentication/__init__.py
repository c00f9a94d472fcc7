"""
Authentication application.

This app owns the user model and credential handling shared by the REST
API and the realtime channel.

Key components:
    - User model: UUID-keyed user with OAuth profile fields and last_seen
    - tokens: Identity, JWTCredentialVerifier and issue_access_token
    - CookieJWTAuthentication: DRF authentication over the same verifier
    - UserService: user lookup for the chat services

Usage:
    from authentication.models import User
    from authentication.tokens import JWTCredentialVerifier, issue_access_token
"""
