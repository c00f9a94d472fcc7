"""
WebSocket URL routing for the chat application.

URL Patterns:
    ws/chat/ - The single realtime endpoint; events are addressed by payload

Authentication:
    The ``auth`` cookie (or ?token=<jwt_access_token>) is verified by
    JWTAuthMiddleware before the consumer runs.
"""

from django.urls import path

from chat import consumers

websocket_urlpatterns = [
    path("ws/chat/", consumers.ChatConsumer.as_asgi()),
]
