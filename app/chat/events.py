"""
Outbound realtime event builders.

Every frame the server sends is a flat JSON object with a ``type`` key and
camelCase fields. Builders here are the single place those shapes live;
consumers, views and the coordinator never assemble frames by hand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from chat.constants import OutboundEvent

if TYPE_CHECKING:
    from typing import Any

    from chat.models import Message


def _iso(value):
    return value.isoformat() if value else None


def new_message(message: Message) -> dict[str, Any]:
    return {"type": OutboundEvent.NEW_MESSAGE, "message": message.to_payload()}


def message_edited(message: Message) -> dict[str, Any]:
    return {
        "type": OutboundEvent.MESSAGE_EDITED,
        "messageId": str(message.id),
        "content": message.content,
        "editedAt": _iso(message.edited_at),
        "conversationId": str(message.conversation_id),
    }


def message_deleted(message: Message) -> dict[str, Any]:
    return {
        "type": OutboundEvent.MESSAGE_DELETED,
        "messageId": str(message.id),
        "conversationId": str(message.conversation_id),
    }


def message_read(message: Message) -> dict[str, Any]:
    return {
        "type": OutboundEvent.MESSAGE_READ,
        "messageId": str(message.id),
        "conversationId": str(message.conversation_id),
    }


def user_status_changed(user_id, status: str) -> dict[str, Any]:
    return {
        "type": OutboundEvent.USER_STATUS_CHANGED,
        "userId": str(user_id),
        "status": status,
    }


def user_typing(user_id, is_typing: bool) -> dict[str, Any]:
    return {
        "type": OutboundEvent.USER_TYPING,
        "userId": str(user_id),
        "isTyping": is_typing,
    }


def error(message: str, code: str) -> dict[str, Any]:
    """Error frame; always sent to the originating connection only."""
    return {"type": OutboundEvent.ERROR, "message": message, "code": code}
