"""
Pagination classes for chat API.

Cursor-based pagination advantages:
- Stable results during concurrent inserts
- Efficient for large datasets
- No offset calculation needed

Design Decisions:
    - Messages ordered oldest-first for natural reading flow
    - Message ids are UUIDv7, so ordering by id alone is chronological
    - Conversations ordered newest activity first
"""

from rest_framework.pagination import CursorPagination

from chat.constants import MESSAGE_CONFIG


class MessageCursorPagination(CursorPagination):
    """
    Cursor pagination for message history.

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of messages (optional override)
    """

    page_size = MESSAGE_CONFIG.HISTORY_PAGE_SIZE
    max_page_size = MESSAGE_CONFIG.HISTORY_MAX_PAGE_SIZE
    page_size_query_param = "page_size"
    ordering = ("id",)
    cursor_query_param = "cursor"


class ConversationCursorPagination(CursorPagination):
    """
    Cursor pagination for conversation lists.

    Orders conversations by most recent activity, so the conversation that
    last received a message comes first.

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of conversations (optional override)
    """

    page_size = MESSAGE_CONFIG.CONVERSATION_PAGE_SIZE
    max_page_size = MESSAGE_CONFIG.CONVERSATION_MAX_PAGE_SIZE
    page_size_query_param = "page_size"
    ordering = ("-updated_at", "-id")
    cursor_query_param = "cursor"
