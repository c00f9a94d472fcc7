"""
Tests for the User model.

Related files:
    - models.py: Implementation under test
"""

import uuid

import pytest
from django.db import IntegrityError

from authentication.tests.factories import UserFactory


class TestUserModel:
    """Tests for the User model."""

    def test_primary_key_is_uuid(self, user):
        assert isinstance(user.id, uuid.UUID)

    def test_str_is_username(self, db):
        user = UserFactory(username="ada")

        assert str(user) == "ada"

    def test_display_name_falls_back_to_username(self, db):
        assert UserFactory(username="ada", name="").display_name == "ada"
        assert UserFactory(username="bob", name="Bob B").display_name == "Bob B"

    def test_username_is_unique(self, db):
        UserFactory(username="taken")

        with pytest.raises(IntegrityError):
            UserFactory(username="taken")

    def test_last_seen_starts_empty(self, user):
        assert user.last_seen is None
