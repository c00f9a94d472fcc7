"""
Authentication models.

This module defines the user record that backs every chat identity:
- User: OAuth-provisioned account (provider, username, display name, avatar)

Related files:
    - managers.py: Custom user manager for provider-based creation
    - tokens.py: Identity claims signed into the ``auth`` cookie
    - services.py: UserService lookups used by the chat core

Security:
    - OAuth users never get a usable password
    - The upstream provider token is stored for profile refresh only and is
      never serialized in API responses
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from core.models import UUIDPrimaryKeyMixin


class AuthProvider(models.TextChoices):
    """OAuth provider the account was created through."""

    DISCORD = "discord", "Discord"
    GITHUB = "github", "GitHub"
    GOOGLE = "google", "Google"


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, PermissionsMixin):
    """
    Custom User model provisioned by an OAuth provider.

    Fields:
        email: Unique login identifier reported by the provider
        username: Unique handle (provider login)
        name: Display name shown in chat
        avatar: Avatar URL
        provider: OAuth provider type
        upstream_token: Opaque provider access token
        last_seen: When the user's last realtime connection closed
        is_active: Inactive users cannot be messaged

    Usage:
        user = User.objects.create_user(
            email="ada@example.com",
            username="ada",
            provider=AuthProvider.GITHUB,
        )
    """

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address reported by the OAuth provider",
    )
    username = models.CharField(
        unique=True,
        max_length=64,
        help_text="Unique handle, usually the provider login",
    )
    name = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Display name",
    )
    avatar = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Avatar image URL",
    )
    provider = models.CharField(
        max_length=16,
        choices=AuthProvider.choices,
        default=AuthProvider.GITHUB,
        help_text="OAuth provider the account was created through",
    )
    upstream_token = models.TextField(
        blank=True,
        default="",
        help_text="Opaque provider access token",
    )
    last_seen = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the user's last realtime connection closed",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        """Return the user's handle as string representation."""
        return self.username

    @property
    def display_name(self) -> str:
        """Name shown in chat, falling back to the handle."""
        return self.name or self.username
