"""
WebSocket consumers for the chat application.

This module implements the WebSocket consumer for real-time direct
messaging: connection admission, presence registration, inbound event
dispatch and forwarding of fanned-out events to the socket.

Consumers:
    ChatConsumer: One instance per live connection

Authentication:
    JWTAuthMiddleware puts the verified Identity (or the failure) in
    self.scope. A refused connection is accepted just long enough to send
    one error event, then closed with code 4001.

Channel Groups:
    user_<id>  every connection of one user (identity channel)
    presence   every live connection

Message Types (from client):
    send_message, mark_message_read, update_status, start_typing,
    stop_typing, edit_message, delete_message

Message Types (to client):
    new_message, message_edited, message_deleted, message_read,
    user_status_changed, user_typing, error
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from channels.generic.websocket import AsyncJsonWebsocketConsumer

from authentication.tokens import AuthErrorCode
from chat import events
from chat.constants import REALTIME_CONFIG, ErrorCode, InboundEvent
from chat.realtime import RealtimeCoordinator
from core.exceptions import AuthenticationError, InternalError

if TYPE_CHECKING:
    from authentication.tokens import Identity
    from core.services import ServiceResult

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for real-time chat functionality.

    Channels delivers one connection's frames to its consumer sequentially,
    so per-connection ordering of inbound events is preserved.

    Attributes:
        identity: Identity the connection was admitted with (None if refused)
        coordinator: RealtimeCoordinator applying operations and fan-out
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.identity: Identity | None = None
        self.coordinator: RealtimeCoordinator | None = None
        self._registered = False
        self._cleaned_up = False

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self):
        """
        Handle WebSocket connection.

        On success, registers presence, joins the identity and presence
        groups and accepts the connection.
        """
        self.identity = self.scope.get("identity")

        if self.identity is None:
            error = self.scope.get("auth_error") or AuthenticationError(
                "No authentication credential provided",
                error_code=AuthErrorCode.MISSING_CREDENTIAL,
            )
            await self._refuse(error)
            return

        self.coordinator = RealtimeCoordinator()
        await self.coordinator.connect(self.identity.id, self.channel_name)
        self._registered = True

        await self.accept()
        logger.info(f"User {self.identity.id} connected on {self.channel_name}")

    async def disconnect(self, close_code):
        """Handle WebSocket disconnection."""
        await self._cleanup()
        logger.info(
            f"Connection {self.channel_name} closed with code {close_code}"
        )

    async def _refuse(self, error: AuthenticationError):
        """Accept, report one authentication error, then close."""
        self._cleaned_up = True
        await self.accept()
        await self.send_json(events.error(**error.to_event()))
        await self.close(code=REALTIME_CONFIG.AUTH_FAILURE_CLOSE_CODE)

    async def _cleanup(self):
        """Deregister presence and leave groups; runs at most once."""
        if self._cleaned_up:
            return
        self._cleaned_up = True

        if self._registered:
            self._registered = False
            await self.coordinator.disconnect(self.identity.id, self.channel_name)

    # =========================================================================
    # Inbound events
    # =========================================================================

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Decode JSON frames, reporting undecodable ones instead of crashing."""
        if text_data is None:
            await self._send_error("Frames must be JSON text", ErrorCode.INVALID_DATA)
            return
        try:
            content = await self.decode_json(text_data)
        except ValueError:
            await self._send_error("Invalid JSON", ErrorCode.INVALID_DATA)
            return
        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        """
        Dispatch an inbound event.

        Expected message format:
            {"type": "send_message", "content": "Hello!", "receiverId": "<uuid>"}
            {"type": "start_typing", "receiverId": "<uuid>"}
        """
        if self.identity is None or self._cleaned_up:
            return

        if self.identity.is_expired():
            logger.info(f"Credential of user {self.identity.id} expired mid-session")
            await self._send_error(
                "Authentication token has expired", AuthErrorCode.TOKEN_EXPIRED
            )
            await self._cleanup()
            await self.close(code=REALTIME_CONFIG.AUTH_FAILURE_CLOSE_CODE)
            return

        if not isinstance(content, dict):
            await self._send_error("Invalid event", ErrorCode.INVALID_DATA)
            return

        event_type = content.get("type")
        handler = self._handlers().get(event_type)
        if handler is None:
            await self._send_error(
                f"Unknown event type: {event_type}", ErrorCode.UNKNOWN_EVENT
            )
            return

        try:
            result = await handler(content)
        except Exception:
            logger.exception(
                f"Unhandled error processing {event_type} from {self.identity.id}"
            )
            await self.send_json(events.error(**InternalError().to_event()))
            return

        if not result:
            await self.send_json(events.error(**result.error_payload()))

    def _handlers(self):
        return {
            InboundEvent.SEND_MESSAGE: self._handle_send_message,
            InboundEvent.MARK_MESSAGE_READ: self._handle_mark_read,
            InboundEvent.UPDATE_STATUS: self._handle_update_status,
            InboundEvent.START_TYPING: self._handle_start_typing,
            InboundEvent.STOP_TYPING: self._handle_stop_typing,
            InboundEvent.EDIT_MESSAGE: self._handle_edit_message,
            InboundEvent.DELETE_MESSAGE: self._handle_delete_message,
        }

    async def _handle_send_message(self, content) -> ServiceResult:
        return await self.coordinator.send_message(
            self.identity.id, content.get("receiverId"), content.get("content")
        )

    async def _handle_mark_read(self, content) -> ServiceResult:
        return await self.coordinator.mark_read(
            self.identity.id, content.get("messageId")
        )

    async def _handle_update_status(self, content) -> ServiceResult:
        return await self.coordinator.update_status(
            self.identity.id, content.get("status"), channel_name=self.channel_name
        )

    async def _handle_start_typing(self, content) -> ServiceResult:
        return await self.coordinator.set_typing(
            self.identity.id, content.get("receiverId"), True
        )

    async def _handle_stop_typing(self, content) -> ServiceResult:
        return await self.coordinator.set_typing(
            self.identity.id, content.get("receiverId"), False
        )

    async def _handle_edit_message(self, content) -> ServiceResult:
        return await self.coordinator.edit_message(
            self.identity.id, content.get("messageId"), content.get("content")
        )

    async def _handle_delete_message(self, content) -> ServiceResult:
        return await self.coordinator.delete_message(
            self.identity.id, content.get("messageId")
        )

    async def _send_error(self, message: str, code: str):
        await self.send_json(events.error(message, code))

    # =========================================================================
    # Channel layer events
    # =========================================================================

    async def chat_event(self, event):
        """
        Handle chat.event messages from the channel layer.

        Forwards the wrapped event to the socket unless this connection
        originated it.
        """
        if self._cleaned_up:
            return
        if event.get("skip_channel") == self.channel_name:
            return
        await self.send_json(event["event"])
