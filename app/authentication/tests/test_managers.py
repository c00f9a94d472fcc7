"""
Tests for UserManager.

Related files:
    - managers.py: Implementation under test
"""

import pytest

from authentication.models import AuthProvider, User


class TestUserManagerCreateUser:
    """Tests for UserManager.create_user() method."""

    def test_creates_oauth_user_without_usable_password(self, db):
        """
        Given an email, username and provider
        When create_user is called without a password
        Then the user cannot log in with a password
        """
        user = User.objects.create_user(
            email="ada@example.com", username="ada", provider=AuthProvider.DISCORD
        )

        assert user.pk is not None
        assert user.username == "ada"
        assert user.provider == AuthProvider.DISCORD
        assert user.has_usable_password() is False

    def test_username_defaults_to_email_local_part(self, db):
        user = User.objects.create_user(email="grace@example.com")

        assert user.username == "grace"

    def test_normalizes_email_domain_to_lowercase(self, db):
        user = User.objects.create_user(email="Test.User@EXAMPLE.COM")

        assert user.email == "Test.User@example.com"

    @pytest.mark.parametrize("email", ["", None])
    def test_raises_valueerror_when_email_missing(self, db, email):
        with pytest.raises(ValueError) as exc_info:
            User.objects.create_user(email=email, username="nobody")

        assert "Email field must be set" in str(exc_info.value)

    def test_sets_password_when_given(self, db):
        user = User.objects.create_user(
            email="pw@example.com", username="pw", password="SecurePass123!"
        )

        assert user.check_password("SecurePass123!") is True


class TestUserManagerCreateSuperuser:
    """Tests for UserManager.create_superuser() method."""

    def test_creates_superuser_with_flags(self, db):
        admin = User.objects.create_superuser(
            email="admin@example.com", username="admin", password="AdminPass123!"
        )

        assert admin.is_staff is True
        assert admin.is_superuser is True

    def test_rejects_is_staff_false(self, db):
        with pytest.raises(ValueError):
            User.objects.create_superuser(
                email="admin@example.com", username="admin", is_staff=False
            )
