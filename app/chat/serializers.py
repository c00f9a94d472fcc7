"""
Serializers for the chat API.

Output mirrors the realtime wire format (camelCase keys) so that clients
render REST history and live events with the same code.

Request serializers document the accepted bodies in the OpenAPI schema;
the service layer stays authoritative for validation so that REST and
websocket callers get identical error codes.
"""

from rest_framework import serializers

from chat.constants import MESSAGE_CONFIG
from chat.models import DirectConversation, Message


class MessageSerializer(serializers.ModelSerializer):
    """Message as carried in ``new_message`` events and history pages."""

    content = serializers.CharField(source="get_display_content", read_only=True)
    senderId = serializers.UUIDField(source="sender_id", read_only=True)
    receiverId = serializers.UUIDField(source="receiver_id", read_only=True)
    conversationId = serializers.UUIDField(source="conversation_id", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    editedAt = serializers.DateTimeField(source="edited_at", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "content",
            "senderId",
            "receiverId",
            "conversationId",
            "status",
            "createdAt",
            "editedAt",
        ]
        read_only_fields = fields


class ConversationSerializer(serializers.ModelSerializer):
    """
    Direct conversation as seen by one of its participants.

    ``otherUserId`` is resolved against the requesting user, passed in the
    serializer context.
    """

    participants = serializers.SerializerMethodField()
    otherUserId = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = DirectConversation
        fields = ["id", "participants", "otherUserId", "createdAt", "updatedAt"]
        read_only_fields = fields

    def get_participants(self, obj) -> list[str]:
        return [str(obj.p1_id), str(obj.p2_id)]

    def get_otherUserId(self, obj) -> str:
        return str(obj.other_participant_id(self.context["request"].user.id))


class MessageCreateSerializer(serializers.Serializer):
    """Request body for sending a message."""

    content = serializers.CharField(max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH)
    receiverId = serializers.UUIDField()


class MessageEditSerializer(serializers.Serializer):
    """Request body for editing a message."""

    content = serializers.CharField(max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH)


class PresenceSerializer(serializers.Serializer):
    """Connection-derived presence of one user."""

    userId = serializers.UUIDField()
    online = serializers.BooleanField()
    connections = serializers.IntegerField()
