"""
Chat application configuration.

This app provides the realtime direct-messaging core:
- Direct (1:1) conversations created on first message
- Message lifecycle (sent, delivered, read, deleted) and edits
- Presence, typing indicators and user status over websockets
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
