"""
Chat app for real-time direct messaging.

This app handles:
- Message sending, editing, deletion and read receipts
- Conversation history
- WebSocket real-time delivery, typing indicators and presence

Related apps:
    - authentication: User model, identities and credential verification
    - core: ServiceResult, exceptions, base models

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for WebSocket handlers.
    See realtime.py for fan-out rules.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.realtime import RealtimeCoordinator

    coordinator = RealtimeCoordinator()
    result = await coordinator.send_message(sender_id, receiver_id, "Hello!")
"""
