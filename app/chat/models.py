"""
Chat system models.

This module defines the data models for direct (1:1) messaging:

Models:
    DirectConversation: Unordered pair of users, created lazily on first message
    Message: Individual message with a forward-only lifecycle status

Design Decisions:
    - Conversation pairs are stored in canonical order (p1 < p2) so that
      either user initiating yields the same row
    - Message ids are UUIDv7 and define the timeline ordering
    - Status only moves forward: sent -> delivered -> read -> deleted
    - Soft delete freezes content; API responses hide it
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import F, Q

from chat.ids import new_message_id
from core.models import BaseModel, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from typing import Any


class MessageStatus(models.TextChoices):
    """
    Lifecycle status of a message.

    SENT: Persisted, recipient had no live connection
    DELIVERED: Recipient had a live connection (or fetched history)
    READ: Recipient acknowledged the message
    DELETED: Soft-deleted by the sender (terminal)
    """

    SENT = "sent", "Sent"
    DELIVERED = "delivered", "Delivered"
    READ = "read", "Read"
    DELETED = "deleted", "Deleted"

    @classmethod
    def advances(cls, current: str, target: str) -> bool:
        """Whether moving from ``current`` to ``target`` is a forward transition."""
        return _STATUS_ORDER[target] > _STATUS_ORDER[current]


_STATUS_ORDER = {
    MessageStatus.SENT: 0,
    MessageStatus.DELIVERED: 1,
    MessageStatus.READ: 2,
    MessageStatus.DELETED: 3,
}


class DirectConversationManager(models.Manager):
    """Manager with canonical pair lookup."""

    def for_pair(self, user_a_id, user_b_id) -> DirectConversation:
        """
        Get or create the conversation between two users.

        Argument order does not matter. Safe under concurrent first
        messages: a lost insert race falls back to the winner's row.
        """
        p1, p2 = sorted([uuid.UUID(str(user_a_id)), uuid.UUID(str(user_b_id))])
        try:
            with transaction.atomic():
                conversation, _ = self.get_or_create(p1_id=p1, p2_id=p2)
        except IntegrityError:
            conversation = self.get(p1_id=p1, p2_id=p2)
        return conversation

    def between(self, user_a_id, user_b_id) -> DirectConversation | None:
        """Existing conversation between two users, without creating one."""
        p1, p2 = sorted([uuid.UUID(str(user_a_id)), uuid.UUID(str(user_b_id))])
        return self.filter(p1_id=p1, p2_id=p2).first()


class DirectConversation(UUIDPrimaryKeyMixin, BaseModel):
    """
    A direct conversation between exactly two users.

    Its id is the ``conversationId`` routing key carried by message events.

    Fields:
        p1: Participant with the lower user id
        p2: Participant with the higher user id

    Constraints:
        - UniqueConstraint(p1, p2): One conversation per pair
        - CheckConstraint(p1_id < p2_id): Enforce canonical order
    """

    p1 = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="Participant with the lower user id",
    )
    p2 = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="Participant with the higher user id",
    )

    objects = DirectConversationManager()

    class Meta:
        db_table = "chat_direct_conversation"
        constraints = [
            models.UniqueConstraint(
                fields=["p1", "p2"],
                name="unique_direct_conversation",
            ),
            models.CheckConstraint(
                condition=Q(p1_id__lt=F("p2_id")),
                name="direct_conversation_canonical_order",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        return f"DirectConversation({self.p1_id}, {self.p2_id})"

    def other_participant_id(self, user_id) -> uuid.UUID:
        """Return the participant that is not ``user_id``."""
        return self.p2_id if str(self.p1_id) == str(user_id) else self.p1_id


class Message(BaseModel):
    """
    A direct message from one user to another.

    Fields:
        id: UUIDv7, strictly increasing in generation order
        conversation: Conversation this message belongs to
        sender: Author (the only user allowed to edit/delete)
        receiver: Recipient (the only user allowed to mark read)
        content: Trimmed text, at most MESSAGE_CONFIG.MAX_CONTENT_LENGTH
        status: Lifecycle status (forward only)
        edited_at: Set on each real content change
        deleted_at: Set once when soft-deleted

    Edits never change status. A deleted message's content is frozen.
    """

    id = models.UUIDField(
        primary_key=True,
        default=new_message_id,
        editable=False,
        help_text="Time-sortable message id (UUIDv7)",
    )

    conversation = models.ForeignKey(
        DirectConversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
        help_text="User who sent this message",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
        help_text="User this message is addressed to",
    )

    content = models.TextField(help_text="Message text")

    status = models.CharField(
        max_length=10,
        choices=MessageStatus.choices,
        default=MessageStatus.SENT,
        db_index=True,
        help_text="Lifecycle status",
    )

    edited_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the content was last changed",
    )
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the message was soft-deleted",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["id"]
        indexes = [
            # Conversation timeline (cursor pagination)
            models.Index(
                fields=["conversation", "id"],
                name="chat_msg_conv_timeline_idx",
            ),
            # Pending delivery upgrades for a recipient
            models.Index(
                fields=["receiver", "status"],
                name="chat_msg_receiver_status_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        content_preview = (
            self.content[:50] + "..." if len(self.content) > 50 else self.content
        )
        deleted_str = " [deleted]" if self.is_deleted else ""
        return f"User {self.sender_id}: {content_preview}{deleted_str}"

    @property
    def is_deleted(self) -> bool:
        return self.status == MessageStatus.DELETED

    def get_display_content(self) -> str:
        """
        Get content suitable for display.

        Returns:
            - "[Message deleted]" if soft deleted
            - Original content otherwise
        """
        if self.is_deleted:
            return "[Message deleted]"
        return self.content

    def to_payload(self) -> dict[str, Any]:
        """
        Serialize to the ``message`` object carried by ``new_message`` events.

        Keys are camelCase and timestamps ISO 8601, matching the wire format.
        """
        return {
            "id": str(self.id),
            "content": self.get_display_content(),
            "senderId": str(self.sender_id),
            "receiverId": str(self.receiver_id),
            "conversationId": str(self.conversation_id),
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "editedAt": self.edited_at.isoformat() if self.edited_at else None,
        }
