"""
Tests for chat app.

This package contains test modules for:
- test_ids.py: Message id ordering
- test_models.py: DirectConversation, Message model tests
- test_presence.py: Presence registry transitions
- test_broadcast.py: Channel layer fan-out
- test_services.py: MessageService tests
- test_realtime.py: RealtimeCoordinator routing
- test_middleware.py: Handshake authentication
- test_consumers.py: WebSocket journeys
- test_views.py: REST API endpoint tests

Usage:
    pytest app/chat/tests/
    pytest app/chat/tests/test_consumers.py
"""
