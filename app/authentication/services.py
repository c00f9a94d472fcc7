"""
Authentication services.

This module provides the UserService class, the chat core's only way of
looking up and touching user records.

Related files:
    - models.py: User
    - tokens.py: Identity produced by credential verification
    - backends.py: DRF authentication that resolves identities to users

Security:
    - Inactive users are treated as absent (cannot authenticate, cannot
      be messaged)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db.models import Q
from django.utils import timezone

from authentication.models import User
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from datetime import datetime

    from django.db.models import QuerySet

USER_NOT_FOUND = "USER_NOT_FOUND"


class UserService(BaseService):
    """
    Lookups and bookkeeping for user records.

    Usage:
        from authentication.services import UserService

        receiver = UserService.get_active_user(receiver_id)
        if receiver is None:
            ...

        UserService.touch_last_seen(user_id)
    """

    @staticmethod
    def parse_user_id(value) -> uuid.UUID | None:
        """
        Parse a user id, returning None when it is not a valid UUID.

        Accepts UUID instances and strings.
        """
        if isinstance(value, uuid.UUID):
            return value
        if not isinstance(value, str):
            return None
        try:
            return uuid.UUID(value)
        except ValueError:
            return None

    @classmethod
    def get_active_user(cls, user_id) -> User | None:
        """
        Fetch an active user by id.

        Args:
            user_id: UUID or UUID string

        Returns:
            The user, or None if the id is malformed, unknown or inactive
        """
        parsed = cls.parse_user_id(user_id)
        if parsed is None:
            return None
        return User.objects.filter(pk=parsed, is_active=True).first()

    @classmethod
    def touch_last_seen(cls, user_id, when: datetime | None = None) -> bool:
        """
        Record when a user's last realtime connection closed.

        Returns:
            True if a row was updated
        """
        parsed = cls.parse_user_id(user_id)
        if parsed is None:
            return False

        updated = User.objects.filter(pk=parsed).update(
            last_seen=when or timezone.now()
        )
        if updated:
            cls.get_logger().debug(f"Updated last_seen for user {parsed}")
        return bool(updated)

    @classmethod
    def search_users(cls, search: str | None = None) -> QuerySet[User]:
        """
        Active users, newest first, optionally filtered by username or name.

        Args:
            search: Case-insensitive substring of the username or name
        """
        users = User.objects.filter(is_active=True)
        if search:
            users = users.filter(
                Q(username__icontains=search) | Q(name__icontains=search)
            )
        return users.order_by("-date_joined", "-id")

    @classmethod
    def get_user_profile(cls, user_id) -> ServiceResult[User]:
        """
        Look up an active user for display.

        Error codes:
            USER_NOT_FOUND: Malformed id, unknown or inactive user
        """
        user = cls.get_active_user(user_id)
        if user is None:
            return ServiceResult.failure("User not found", error_code=USER_NOT_FOUND)
        return ServiceResult.success(user)
