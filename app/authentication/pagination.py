"""
Pagination classes for the user directory.
"""

from rest_framework.pagination import CursorPagination


class UserCursorPagination(CursorPagination):
    """
    Cursor pagination for user lists, newest accounts first.

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of users (optional override)
    """

    page_size = 20
    max_page_size = 100
    page_size_query_param = "page_size"
    ordering = ("-date_joined", "-id")
    cursor_query_param = "cursor"
