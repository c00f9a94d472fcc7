"""
URL configuration for chat API.

URL Structure:
    Messages:
        /messages/                               POST
        /messages/{id}/                          PATCH, DELETE
        /messages/{id}/read/                     PUT

    Conversations:
        /conversations/                          GET
        /conversations/{id}/                     GET, DELETE

    History:
        /conversations/{user_id}/messages/       GET

    Presence:
        /presence/{user_id}/                     GET

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat.views import (
    ConversationDetailView,
    ConversationListView,
    ConversationMessagesView,
    MessageCreateView,
    MessageDetailView,
    MessageReadView,
    UserPresenceView,
)

app_name = "chat"

urlpatterns = [
    path("messages/", MessageCreateView.as_view(), name="message-create"),
    path(
        "messages/<uuid:message_id>/",
        MessageDetailView.as_view(),
        name="message-detail",
    ),
    path(
        "messages/<uuid:message_id>/read/",
        MessageReadView.as_view(),
        name="message-read",
    ),
    path(
        "conversations/",
        ConversationListView.as_view(),
        name="conversation-list",
    ),
    path(
        "conversations/<uuid:conversation_id>/",
        ConversationDetailView.as_view(),
        name="conversation-detail",
    ),
    path(
        "conversations/<uuid:user_id>/messages/",
        ConversationMessagesView.as_view(),
        name="conversation-messages",
    ),
    path("presence/<uuid:user_id>/", UserPresenceView.as_view(), name="presence-user"),
]
