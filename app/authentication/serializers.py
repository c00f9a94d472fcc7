"""
Serializers for authentication models.

Security:
    - The upstream provider token is never serialized
    - All fields are read-only; profiles are owned by the OAuth provider
"""

from rest_framework import serializers

from authentication.models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model (read operations).

    Used by /api/v1/auth/me/, the user directory and wherever a user
    profile is embedded.
    """

    displayName = serializers.CharField(source="display_name", read_only=True)
    lastSeen = serializers.DateTimeField(source="last_seen", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "name",
            "displayName",
            "avatar",
            "provider",
            "lastSeen",
        ]
        read_only_fields = fields
