"""
REST API for chat.

This module exposes the realtime operations over HTTP. Every message
mutation goes through RealtimeCoordinator, so live sockets see
REST-originated messages, edits, deletions and read receipts exactly as if
they came from a socket.

URL Structure:
    /api/v1/chat/messages/                              POST
    /api/v1/chat/messages/{id}/                         PATCH, DELETE
    /api/v1/chat/messages/{id}/read/                    PUT
    /api/v1/chat/conversations/                         GET
    /api/v1/chat/conversations/{id}/                    GET, DELETE
    /api/v1/chat/conversations/{user_id}/messages/      GET
    /api/v1/chat/presence/{user_id}/                    GET

Design Decisions:
    - Service error codes are returned unchanged so REST and websocket
      clients share one error vocabulary
    - Not-found and not-permitted both answer 404
"""

from __future__ import annotations

from asgiref.sync import async_to_sync
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.constants import ErrorCode
from chat.models import Message
from chat.pagination import ConversationCursorPagination, MessageCursorPagination
from chat.realtime import RealtimeCoordinator
from chat.serializers import (
    ConversationSerializer,
    MessageCreateSerializer,
    MessageEditSerializer,
    MessageSerializer,
    PresenceSerializer,
)
from chat.services import ConversationService, MessageService

NOT_FOUND_CODES = {
    ErrorCode.MESSAGE_NOT_FOUND,
    ErrorCode.RECEIVER_NOT_FOUND,
    ErrorCode.CONVERSATION_NOT_FOUND,
}


def error_response(result) -> Response:
    """Map a failed ServiceResult to an HTTP response."""
    http_status = (
        status.HTTP_404_NOT_FOUND
        if result.error_code in NOT_FOUND_CODES
        else status.HTTP_400_BAD_REQUEST
    )
    return Response(result.to_response(), status=http_status)


class RealtimeAPIView(APIView):
    """Base view holding a coordinator for the request."""

    permission_classes = [IsAuthenticated]

    def get_coordinator(self) -> RealtimeCoordinator:
        return RealtimeCoordinator()


class MessageCreateView(RealtimeAPIView):
    """
    POST /api/v1/chat/messages/
        Send a message (same pipeline as the ``send_message`` event).
    """

    @extend_schema(
        operation_id="send_message",
        summary="Send message",
        description=(
            "Send a direct message. The message is stored, then delivered live "
            "to the recipient and echoed to the sender's other connections. "
            "Status is 'delivered' if the recipient was connected, else 'sent'."
        ),
        request=MessageCreateSerializer,
        responses={
            201: MessageSerializer,
            400: OpenApiResponse(description="Validation failed"),
            404: OpenApiResponse(description="Receiver not found"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        result = async_to_sync(self.get_coordinator().send_message)(
            request.user.id,
            request.data.get("receiverId"),
            request.data.get("content"),
        )
        if not result.success:
            return error_response(result)

        return Response(
            MessageSerializer(result.data).data, status=status.HTTP_201_CREATED
        )


class MessageDetailView(RealtimeAPIView):
    """
    PATCH  /api/v1/chat/messages/{id}/  Edit content (sender only)
    DELETE /api/v1/chat/messages/{id}/  Soft delete (sender only, idempotent)
    """

    @extend_schema(
        operation_id="edit_message",
        summary="Edit message",
        request=MessageEditSerializer,
        responses={
            200: MessageSerializer,
            400: OpenApiResponse(description="Empty or too long content"),
            404: OpenApiResponse(description="Message not found"),
        },
        tags=["Chat - Messages"],
    )
    def patch(self, request, message_id):
        result = async_to_sync(self.get_coordinator().edit_message)(
            request.user.id, str(message_id), request.data.get("content")
        )
        if not result.success:
            return error_response(result)

        return Response(MessageSerializer(result.data.message).data)

    @extend_schema(
        operation_id="delete_message",
        summary="Delete message",
        responses={
            204: OpenApiResponse(description="Deleted (or already deleted)"),
            404: OpenApiResponse(description="Message not found"),
        },
        tags=["Chat - Messages"],
    )
    def delete(self, request, message_id):
        result = async_to_sync(self.get_coordinator().delete_message)(
            request.user.id, str(message_id)
        )
        if not result.success:
            return error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)


class MessageReadView(RealtimeAPIView):
    """
    PUT /api/v1/chat/messages/{id}/read/
        Mark a received message read (recipient only, idempotent).
    """

    @extend_schema(
        operation_id="mark_message_read",
        summary="Mark message read",
        request=None,
        responses={
            200: MessageSerializer,
            404: OpenApiResponse(description="Message not found"),
        },
        tags=["Chat - Messages"],
    )
    def put(self, request, message_id):
        result = async_to_sync(self.get_coordinator().mark_read)(
            request.user.id, str(message_id)
        )
        if not result.success:
            return error_response(result)

        return Response(MessageSerializer(result.data.message).data)


@extend_schema(
    operation_id="list_conversation_messages",
    summary="Conversation history",
    description=(
        "Messages exchanged with another user, oldest first. Fetching history "
        "marks the caller's received 'sent' messages as 'delivered'."
    ),
    parameters=[
        OpenApiParameter(
            name="user_id",
            type=OpenApiTypes.UUID,
            location=OpenApiParameter.PATH,
            description="UUID of the other participant",
        ),
    ],
    tags=["Chat - Messages"],
)
class ConversationMessagesView(ListAPIView):
    """
    GET /api/v1/chat/conversations/{user_id}/messages/
        Cursor-paginated history with one peer.
    """

    permission_classes = [IsAuthenticated]
    queryset = Message.objects.none()
    serializer_class = MessageSerializer
    pagination_class = MessageCursorPagination

    def list(self, request, user_id=None):
        result = MessageService.list_conversation_messages(request.user.id, user_id)
        if not result.success:
            return error_response(result)

        page = self.paginate_queryset(result.data)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)


# =============================================================================
# Conversations
# =============================================================================


@extend_schema(
    operation_id="list_conversations",
    summary="List conversations",
    description=(
        "Direct conversations the caller takes part in, most recent activity "
        "first. Sending a message moves its conversation to the top."
    ),
    tags=["Chat - Conversations"],
)
class ConversationListView(ListAPIView):
    """
    GET /api/v1/chat/conversations/
        Cursor-paginated list of the caller's conversations.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ConversationSerializer
    pagination_class = ConversationCursorPagination

    def get_queryset(self):
        return ConversationService.list_conversations(self.request.user.id)


class ConversationDetailView(APIView):
    """
    GET    /api/v1/chat/conversations/{id}/  Conversation details
    DELETE /api/v1/chat/conversations/{id}/  Delete for both participants
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        responses={
            200: ConversationSerializer,
            404: OpenApiResponse(description="Conversation not found"),
        },
        tags=["Chat - Conversations"],
    )
    def get(self, request, conversation_id):
        result = ConversationService.get_conversation(request.user.id, conversation_id)
        if not result.success:
            return error_response(result)

        return Response(
            ConversationSerializer(result.data, context={"request": request}).data
        )

    @extend_schema(
        operation_id="delete_conversation",
        summary="Delete conversation",
        description="Remove the conversation and its messages for both participants.",
        responses={
            204: OpenApiResponse(description="Deleted"),
            404: OpenApiResponse(description="Conversation not found"),
        },
        tags=["Chat - Conversations"],
    )
    def delete(self, request, conversation_id):
        result = ConversationService.delete_conversation(
            request.user.id, conversation_id
        )
        if not result.success:
            return error_response(result)

        return Response(status=status.HTTP_204_NO_CONTENT)


class UserPresenceView(RealtimeAPIView):
    """
    GET /api/v1/chat/presence/{user_id}/
        Connection-derived presence of a user.
    """

    @extend_schema(
        operation_id="get_user_presence",
        summary="Get user presence",
        description=(
            "Whether the user has at least one live realtime connection, and "
            "how many."
        ),
        parameters=[
            OpenApiParameter(
                name="user_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.PATH,
                description="UUID of the user to query",
            ),
        ],
        responses={200: PresenceSerializer},
        tags=["Chat - Presence"],
    )
    def get(self, request, user_id):
        registry = self.get_coordinator().registry
        connections = async_to_sync(registry.active_connections)(user_id)
        data = {
            "userId": user_id,
            "online": bool(connections),
            "connections": len(connections),
        }
        return Response(PresenceSerializer(data).data)
