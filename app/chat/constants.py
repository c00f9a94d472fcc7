"""
Constants and configuration for the realtime chat core.

This module centralizes configuration values for:
- Message operations (content limits, lifecycle statuses)
- Presence tracking (registry keys, broadcast group)
- Realtime transport (event names, close codes, error codes)

Import example:
    from chat.constants import MESSAGE_CONFIG, ErrorCode, InboundEvent
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    # Content limits (measured after trimming surrounding whitespace)
    MAX_CONTENT_LENGTH: Final[int] = 2000  # Characters
    MIN_CONTENT_LENGTH: Final[int] = 1

    # History pagination
    HISTORY_PAGE_SIZE: Final[int] = 50
    HISTORY_MAX_PAGE_SIZE: Final[int] = 100

    # Conversation list pagination
    CONVERSATION_PAGE_SIZE: Final[int] = 20
    CONVERSATION_MAX_PAGE_SIZE: Final[int] = 100


# =============================================================================
# Presence Configuration
# =============================================================================


class PRESENCE_CONFIG:
    """Configuration for presence tracking."""

    # Redis key prefix for per-user connection sets
    KEY_PREFIX_USER_CONNECTIONS: Final[str] = "presence:user"

    # Channel layer group every connection joins for presence/status fan-out
    BROADCAST_GROUP: Final[str] = "presence"

    # Allowed values for user-asserted status
    STATUSES: Final[tuple] = ("online", "offline")


# =============================================================================
# Realtime Configuration
# =============================================================================


class REALTIME_CONFIG:
    """Configuration for the websocket transport."""

    # Identity channel group prefix (channel layer names allow [a-zA-Z0-9-_.])
    IDENTITY_GROUP_PREFIX: Final[str] = "user_"

    # Close code sent after an authentication failure
    AUTH_FAILURE_CLOSE_CODE: Final[int] = 4001

    # Handshake credential sources
    TOKEN_QUERY_PARAM: Final[str] = "token"


# =============================================================================
# Event Names
# =============================================================================


class InboundEvent:
    """Event types a client may send."""

    SEND_MESSAGE: Final[str] = "send_message"
    MARK_MESSAGE_READ: Final[str] = "mark_message_read"
    UPDATE_STATUS: Final[str] = "update_status"
    START_TYPING: Final[str] = "start_typing"
    STOP_TYPING: Final[str] = "stop_typing"
    EDIT_MESSAGE: Final[str] = "edit_message"
    DELETE_MESSAGE: Final[str] = "delete_message"


class OutboundEvent:
    """Event types the server sends."""

    NEW_MESSAGE: Final[str] = "new_message"
    MESSAGE_EDITED: Final[str] = "message_edited"
    MESSAGE_DELETED: Final[str] = "message_deleted"
    MESSAGE_READ: Final[str] = "message_read"
    USER_STATUS_CHANGED: Final[str] = "user_status_changed"
    USER_TYPING: Final[str] = "user_typing"
    ERROR: Final[str] = "error"


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode:
    """Machine-readable codes carried by outbound ``error`` events."""

    INVALID_DATA: Final[str] = "INVALID_DATA"
    EMPTY_MESSAGE: Final[str] = "EMPTY_MESSAGE"
    MESSAGE_TOO_LONG: Final[str] = "MESSAGE_TOO_LONG"
    INVALID_RECEIVER: Final[str] = "INVALID_RECEIVER"
    SELF_MESSAGE: Final[str] = "SELF_MESSAGE"
    RECEIVER_NOT_FOUND: Final[str] = "RECEIVER_NOT_FOUND"
    MESSAGE_NOT_FOUND: Final[str] = "MESSAGE_NOT_FOUND"
    CONVERSATION_NOT_FOUND: Final[str] = "CONVERSATION_NOT_FOUND"
    INVALID_STATUS: Final[str] = "INVALID_STATUS"
    UNKNOWN_EVENT: Final[str] = "UNKNOWN_EVENT"
    INTERNAL_ERROR: Final[str] = "INTERNAL_ERROR"
