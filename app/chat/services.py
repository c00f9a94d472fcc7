"""
Chat system service layer.

This module provides the business logic for direct messaging: validation,
persistence and lifecycle transitions of messages. It knows nothing about
sockets or channel layers; the realtime coordinator and the REST views call
it and decide what to fan out.

Services:
    MessageService: Message operations (send, edit, delete, mark as read, history)
    ConversationService: Conversation list, lookup and deletion

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure() with an ErrorCode
    - Unexpected failures raise exceptions
    - Mutations lock the message row inside a transaction
    - Not-found and not-permitted are indistinguishable to callers

Usage:
    from chat.services import MessageService

    result = MessageService.send_message(
        sender_id=identity.id,
        receiver_id=payload.get("receiverId"),
        content=payload.get("content"),
        recipient_online=True,
    )
    if result.success:
        message = result.data
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db.models import Q
from django.utils import timezone

from authentication.services import UserService
from chat.constants import MESSAGE_CONFIG, PRESENCE_CONFIG, ErrorCode
from chat.models import DirectConversation, Message, MessageStatus
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet


@dataclass(frozen=True)
class SendRequest:
    """Validated send input: trimmed content and parsed receiver id."""

    content: str
    receiver_id: uuid.UUID


@dataclass(frozen=True)
class MessageMutation:
    """
    Outcome of a lifecycle operation.

    Attributes:
        message: The message after the operation
        changed: False when the operation was an idempotent no-op, in which
            case nothing should be broadcast
    """

    message: Message
    changed: bool


class MessageService(BaseService):
    """
    Service for message operations.

    Methods:
        validate_content: Content checks shared by send and edit
        validate_send: Ordered send validation (first failure wins)
        send_message: Validate, persist and return a new message
        edit_message: Sender-only content change
        delete_message: Sender-only soft delete (idempotent)
        mark_as_read: Recipient-only read receipt (idempotent)
        list_conversation_messages: History with a peer, upgrading delivery
        validate_status: User-asserted status check
    """

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def validate_content(content) -> ServiceResult[str]:
        """
        Check message content.

        Returns:
            ServiceResult with the trimmed content

        Error codes:
            INVALID_DATA: Content is not a string
            EMPTY_MESSAGE: Nothing left after trimming
            MESSAGE_TOO_LONG: More than MAX_CONTENT_LENGTH characters after trimming
        """
        if not isinstance(content, str):
            return ServiceResult.failure(
                "Invalid message data", error_code=ErrorCode.INVALID_DATA
            )

        content = content.strip()
        if len(content) < MESSAGE_CONFIG.MIN_CONTENT_LENGTH:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code=ErrorCode.EMPTY_MESSAGE,
            )

        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message cannot exceed {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code=ErrorCode.MESSAGE_TOO_LONG,
            )

        return ServiceResult.success(content)

    @classmethod
    def validate_send(
        cls, sender_id, receiver_id, content
    ) -> ServiceResult[SendRequest]:
        """
        Validate send input without touching the database.

        Checks run in this order and the first failure wins:
            INVALID_DATA: content not a string
            EMPTY_MESSAGE: content blank after trimming
            MESSAGE_TOO_LONG: content over the limit after trimming
            INVALID_DATA: receiverId missing / not a string
            INVALID_RECEIVER: receiverId is not a UUID
            SELF_MESSAGE: receiverId is the sender
        """
        content_result = cls.validate_content(content)
        if not content_result:
            return content_result

        if not isinstance(receiver_id, str):
            return ServiceResult.failure(
                "Invalid message data", error_code=ErrorCode.INVALID_DATA
            )

        try:
            receiver_uuid = uuid.UUID(receiver_id)
        except ValueError:
            return ServiceResult.failure(
                "Invalid receiver", error_code=ErrorCode.INVALID_RECEIVER
            )

        if str(receiver_uuid) == str(sender_id):
            return ServiceResult.failure(
                "Cannot send a message to yourself",
                error_code=ErrorCode.SELF_MESSAGE,
            )

        return ServiceResult.success(
            SendRequest(content=content_result.data, receiver_id=receiver_uuid)
        )

    @staticmethod
    def parse_message_id(message_id) -> ServiceResult[uuid.UUID]:
        """
        Parse a message id from client input.

        Error codes:
            INVALID_DATA: Missing or not a UUID string
        """
        if isinstance(message_id, uuid.UUID):
            return ServiceResult.success(message_id)
        if not isinstance(message_id, str):
            return ServiceResult.failure(
                "Invalid message id", error_code=ErrorCode.INVALID_DATA
            )
        try:
            return ServiceResult.success(uuid.UUID(message_id))
        except ValueError:
            return ServiceResult.failure(
                "Invalid message id", error_code=ErrorCode.INVALID_DATA
            )

    @staticmethod
    def validate_status(status) -> ServiceResult[str]:
        """
        Check a user-asserted status.

        Error codes:
            INVALID_STATUS: Not one of PRESENCE_CONFIG.STATUSES
        """
        if status not in PRESENCE_CONFIG.STATUSES:
            return ServiceResult.failure(
                f"Invalid status: {status}", error_code=ErrorCode.INVALID_STATUS
            )
        return ServiceResult.success(status)

    @staticmethod
    def _not_found() -> ServiceResult:
        return ServiceResult.failure(
            "Message not found", error_code=ErrorCode.MESSAGE_NOT_FOUND
        )

    # =========================================================================
    # Send
    # =========================================================================

    @classmethod
    def send_message(
        cls,
        sender_id,
        receiver_id,
        content,
        recipient_online: bool = False,
    ) -> ServiceResult[Message]:
        """
        Validate and persist a new message.

        Persistence completes before this returns, so callers only ever
        broadcast stored messages.

        Args:
            sender_id: Authenticated sender's id
            receiver_id: Raw receiverId from the client
            content: Raw content from the client
            recipient_online: Whether the recipient had a live connection when
                the message was accepted (status becomes ``delivered``)

        Returns:
            ServiceResult with the stored Message

        Error codes:
            Everything validate_send reports, plus
            RECEIVER_NOT_FOUND: Receiver does not exist or is inactive
        """
        validation = cls.validate_send(sender_id, receiver_id, content)
        if not validation:
            return validation
        request = validation.data

        receiver = UserService.get_active_user(request.receiver_id)
        if receiver is None:
            return ServiceResult.failure(
                "Receiver not found", error_code=ErrorCode.RECEIVER_NOT_FOUND
            )

        status = MessageStatus.DELIVERED if recipient_online else MessageStatus.SENT

        with cls.atomic():
            conversation = DirectConversation.objects.for_pair(sender_id, receiver.id)
            message = Message.objects.create(
                conversation=conversation,
                sender_id=sender_id,
                receiver=receiver,
                content=request.content,
                status=status,
            )
            # Conversation lists are ordered by latest activity
            conversation.save(update_fields=["updated_at"])

        cls.get_logger().info(
            f"Message {message.id} stored from {sender_id} to {receiver.id} "
            f"({status})"
        )
        return ServiceResult.success(message)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @classmethod
    def edit_message(cls, actor_id, message_id, content) -> ServiceResult[MessageMutation]:
        """
        Replace the content of a message.

        Only the sender can edit. Edits never change status. Identical
        trimmed content is a successful no-op.

        Error codes:
            INVALID_DATA: Malformed message id or content not a string
            EMPTY_MESSAGE / MESSAGE_TOO_LONG: Same rules as send
            MESSAGE_NOT_FOUND: Absent, deleted, or not the actor's message
        """
        id_result = cls.parse_message_id(message_id)
        if not id_result:
            return id_result

        content_result = cls.validate_content(content)
        if not content_result:
            return content_result
        new_content = content_result.data

        with cls.atomic():
            message = (
                Message.objects.select_for_update().filter(pk=id_result.data).first()
            )
            if (
                message is None
                or str(message.sender_id) != str(actor_id)
                or message.is_deleted
            ):
                return cls._not_found()

            if message.content == new_content:
                return ServiceResult.success(MessageMutation(message, changed=False))

            message.content = new_content
            message.edited_at = timezone.now()
            message.save(update_fields=["content", "edited_at", "updated_at"])

        cls.get_logger().info(f"Message {message.id} edited by {actor_id}")
        return ServiceResult.success(MessageMutation(message, changed=True))

    @classmethod
    def delete_message(cls, actor_id, message_id) -> ServiceResult[MessageMutation]:
        """
        Soft-delete a message.

        Only the sender can delete. Deleting an already deleted message
        succeeds with ``changed=False``.

        Error codes:
            INVALID_DATA: Malformed message id
            MESSAGE_NOT_FOUND: Absent or not the actor's message
        """
        id_result = cls.parse_message_id(message_id)
        if not id_result:
            return id_result

        with cls.atomic():
            message = (
                Message.objects.select_for_update().filter(pk=id_result.data).first()
            )
            if message is None or str(message.sender_id) != str(actor_id):
                return cls._not_found()

            if message.is_deleted:
                return ServiceResult.success(MessageMutation(message, changed=False))

            message.status = MessageStatus.DELETED
            message.deleted_at = timezone.now()
            message.save(update_fields=["status", "deleted_at", "updated_at"])

        cls.get_logger().info(f"Message {message.id} deleted by {actor_id}")
        return ServiceResult.success(MessageMutation(message, changed=True))

    @classmethod
    def mark_as_read(cls, actor_id, message_id) -> ServiceResult[MessageMutation]:
        """
        Record that the recipient has read a message.

        Only the recipient can mark read. Already read is a successful no-op.

        Error codes:
            INVALID_DATA: Malformed message id
            MESSAGE_NOT_FOUND: Absent, deleted, or not addressed to the actor
        """
        id_result = cls.parse_message_id(message_id)
        if not id_result:
            return id_result

        with cls.atomic():
            message = (
                Message.objects.select_for_update().filter(pk=id_result.data).first()
            )
            if (
                message is None
                or str(message.receiver_id) != str(actor_id)
                or message.is_deleted
            ):
                return cls._not_found()

            if not MessageStatus.advances(message.status, MessageStatus.READ):
                return ServiceResult.success(MessageMutation(message, changed=False))

            message.status = MessageStatus.READ
            message.save(update_fields=["status", "updated_at"])

        cls.get_logger().info(f"Message {message.id} read by {actor_id}")
        return ServiceResult.success(MessageMutation(message, changed=True))

    # =========================================================================
    # History
    # =========================================================================

    @classmethod
    def list_conversation_messages(cls, user_id, peer_id) -> ServiceResult[QuerySet]:
        """
        Messages exchanged between ``user_id`` and ``peer_id``, oldest first.

        Fetching history upgrades the caller's received ``sent`` messages to
        ``delivered``. This is best-effort bookkeeping, never a read receipt,
        and emits no events.

        Error codes:
            INVALID_RECEIVER: peer_id is not a UUID
            RECEIVER_NOT_FOUND: Peer does not exist
        """
        peer_uuid = UserService.parse_user_id(peer_id)
        if peer_uuid is None:
            return ServiceResult.failure(
                "Invalid receiver", error_code=ErrorCode.INVALID_RECEIVER
            )

        peer = UserService.get_active_user(peer_uuid)
        if peer is None:
            return ServiceResult.failure(
                "Receiver not found", error_code=ErrorCode.RECEIVER_NOT_FOUND
            )

        conversation = DirectConversation.objects.between(user_id, peer.id)
        if conversation is None:
            return ServiceResult.success(Message.objects.none())

        upgraded = Message.objects.filter(
            conversation=conversation,
            receiver_id=user_id,
            status=MessageStatus.SENT,
        ).update(status=MessageStatus.DELIVERED, updated_at=timezone.now())
        if upgraded:
            cls.get_logger().debug(
                f"Upgraded {upgraded} messages to delivered for {user_id}"
            )

        return ServiceResult.success(
            Message.objects.filter(conversation=conversation).order_by("id")
        )


class ConversationService(BaseService):
    """
    Service for direct conversation operations.

    A conversation is visible only to its two participants. Anyone else gets
    CONVERSATION_NOT_FOUND, exactly as for an id that does not exist.

    Methods:
        list_conversations: A user's conversations, latest activity first
        get_conversation: One conversation the user takes part in
        delete_conversation: Remove a conversation and its messages
    """

    @staticmethod
    def _not_found() -> ServiceResult:
        return ServiceResult.failure(
            "Conversation not found", error_code=ErrorCode.CONVERSATION_NOT_FOUND
        )

    @classmethod
    def list_conversations(cls, user_id) -> QuerySet:
        """Conversations ``user_id`` takes part in, latest activity first."""
        return DirectConversation.objects.filter(
            Q(p1_id=user_id) | Q(p2_id=user_id)
        ).order_by("-updated_at", "-id")

    @classmethod
    def get_conversation(cls, user_id, conversation_id) -> ServiceResult[DirectConversation]:
        """
        Fetch a conversation the user takes part in.

        Error codes:
            CONVERSATION_NOT_FOUND: Absent, malformed id, or not a participant
        """
        try:
            parsed = uuid.UUID(str(conversation_id))
        except ValueError:
            return cls._not_found()

        conversation = cls.list_conversations(user_id).filter(pk=parsed).first()
        if conversation is None:
            return cls._not_found()
        return ServiceResult.success(conversation)

    @classmethod
    def delete_conversation(cls, user_id, conversation_id) -> ServiceResult[None]:
        """
        Delete a conversation for both participants.

        Its messages are removed with it. A later message between the same
        pair starts a new conversation.

        Error codes:
            CONVERSATION_NOT_FOUND: Absent, malformed id, or not a participant
        """
        result = cls.get_conversation(user_id, conversation_id)
        if not result:
            return result

        conversation = result.data
        conversation_id = conversation.pk
        with cls.atomic():
            conversation.delete()

        cls.get_logger().info(f"Conversation {conversation_id} deleted by {user_id}")
        return ServiceResult.success()
