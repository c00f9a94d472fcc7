"""
Realtime coordination between the service layer, presence and fan-out.

RealtimeCoordinator is transport-agnostic: ChatConsumer calls it for
websocket events and the REST views call it for the same operations, so a
message sent over HTTP reaches live sockets exactly like one sent over a
socket.

Routing rules:
    new_message          recipient + sender identity channels (sender echo)
    message_edited       recipient + sender identity channels
    message_deleted      recipient + sender identity channels
    message_read         sender + reader identity channels
    user_typing          recipient identity channel only
    user_status_changed  presence group, originating connection skipped

Every operation returns a ServiceResult; failures carry the error code the
caller reports to the originating connection only, and nothing is fanned
out.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from channels.db import database_sync_to_async

from authentication.services import UserService
from chat import events
from chat.broadcast import ChannelBroadcaster
from chat.constants import ErrorCode
from chat.presence import get_presence_registry
from chat.services import MessageService
from core.services import ServiceResult

if TYPE_CHECKING:
    from chat.models import Message
    from chat.presence import PresenceRegistry

logger = logging.getLogger(__name__)


class RealtimeCoordinator:
    """
    Apply chat operations and fan their effects out to live connections.

    Args:
        registry: Presence registry (defaults to the process-wide one)
        broadcaster: Channel layer fan-out (defaults to the default layer)

    Usage:
        coordinator = RealtimeCoordinator()
        result = await coordinator.send_message(identity.id, receiver_id, content)
        if not result:
            await self.send_json(events.error(result.error, result.error_code))
    """

    def __init__(
        self,
        registry: PresenceRegistry | None = None,
        broadcaster: ChannelBroadcaster | None = None,
    ):
        self.registry = registry or get_presence_registry()
        self.broadcaster = broadcaster or ChannelBroadcaster()

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self, user_id, channel_name: str) -> bool:
        """
        Register a live connection and join its groups.

        Broadcasts ``online`` only when this is the user's first connection.
        If registration fails the group memberships are undone before the
        error propagates.

        Returns:
            True if the user just came online
        """
        try:
            await self.broadcaster.join(user_id, channel_name)
            came_online = await self.registry.register(user_id, channel_name)
        except Exception:
            logger.exception(f"Registering connection {channel_name} failed")
            await self.broadcaster.leave(user_id, channel_name)
            raise

        if came_online:
            logger.info(f"User {user_id} is online")
            await self.broadcaster.to_everyone(
                events.user_status_changed(user_id, "online"),
                skip_channel=channel_name,
            )
        return came_online

    async def disconnect(self, user_id, channel_name: str) -> bool:
        """
        Remove a connection and leave its groups.

        Broadcasts ``offline`` exactly once, when the last connection closes,
        then records ``last_seen`` on the user. A failing ``last_seen`` write
        is logged and never suppresses the broadcast.

        Returns:
            True if the user just went offline
        """
        went_offline = await self.registry.deregister(user_id, channel_name)
        await self.broadcaster.leave(user_id, channel_name)
        if went_offline:
            logger.info(f"User {user_id} is offline")
            await self.broadcaster.to_everyone(
                events.user_status_changed(user_id, "offline"),
                skip_channel=channel_name,
            )
            try:
                await database_sync_to_async(UserService.touch_last_seen)(user_id)
            except Exception:
                logger.exception(f"Recording last_seen for user {user_id} failed")
        return went_offline

    async def is_online(self, user_id) -> bool:
        return await self.registry.is_online(user_id)

    # =========================================================================
    # Messages
    # =========================================================================

    async def send_message(
        self, sender_id, receiver_id, content
    ) -> ServiceResult[Message]:
        """
        Validate, persist and deliver a new message.

        Status is ``delivered`` if the recipient had at least one live
        connection when the message was accepted, ``sent`` otherwise.
        """
        validation = MessageService.validate_send(sender_id, receiver_id, content)
        if not validation:
            return validation

        recipient_online = await self.registry.is_online(validation.data.receiver_id)
        result = await database_sync_to_async(MessageService.send_message)(
            sender_id, receiver_id, content, recipient_online=recipient_online
        )
        if not result:
            return result

        message = result.data
        await self.broadcaster.to_users(
            [message.receiver_id, message.sender_id], events.new_message(message)
        )
        return result

    async def edit_message(self, actor_id, message_id, content) -> ServiceResult:
        result = await database_sync_to_async(MessageService.edit_message)(
            actor_id, message_id, content
        )
        if result and result.data.changed:
            message = result.data.message
            await self.broadcaster.to_users(
                [message.receiver_id, message.sender_id],
                events.message_edited(message),
            )
        return result

    async def delete_message(self, actor_id, message_id) -> ServiceResult:
        result = await database_sync_to_async(MessageService.delete_message)(
            actor_id, message_id
        )
        if result and result.data.changed:
            message = result.data.message
            await self.broadcaster.to_users(
                [message.receiver_id, message.sender_id],
                events.message_deleted(message),
            )
        return result

    async def mark_read(self, actor_id, message_id) -> ServiceResult:
        result = await database_sync_to_async(MessageService.mark_as_read)(
            actor_id, message_id
        )
        if result and result.data.changed:
            message = result.data.message
            await self.broadcaster.to_users(
                [message.sender_id, message.receiver_id],
                events.message_read(message),
            )
        return result

    # =========================================================================
    # Typing and status
    # =========================================================================

    async def set_typing(self, user_id, receiver_id, is_typing: bool) -> ServiceResult:
        """
        Tell one recipient whether ``user_id`` is typing to them.

        Error codes:
            INVALID_DATA: receiverId missing or not a string
            INVALID_RECEIVER: receiverId not a UUID
        """
        if not isinstance(receiver_id, str):
            return ServiceResult.failure(
                "Invalid typing data", error_code=ErrorCode.INVALID_DATA
            )

        target = UserService.parse_user_id(receiver_id)
        if target is None:
            return ServiceResult.failure(
                "Invalid receiver", error_code=ErrorCode.INVALID_RECEIVER
            )

        await self.broadcaster.to_users([target], events.user_typing(user_id, is_typing))
        return ServiceResult.success()

    async def update_status(
        self, user_id, status, channel_name: str | None = None
    ) -> ServiceResult[str]:
        """
        Broadcast a user-asserted status to every other connection.

        Independent of connection-derived presence: asserting ``offline``
        does not deregister anything.
        """
        result = MessageService.validate_status(status)
        if not result:
            return result

        await self.broadcaster.to_everyone(
            events.user_status_changed(user_id, result.data),
            skip_channel=channel_name,
        )
        return result
