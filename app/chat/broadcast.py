"""
Channel layer fan-out.

Each connection joins two channel layer groups:
    user_<id>  identity channel, one per user, every device of that user
    presence   every live connection, for presence/status changes

Events are wrapped in a ``chat.event`` layer message that ChatConsumer
forwards to its socket unless the connection is the one named in
``skip_channel``.

Fan-out to several groups attempts every group. A failing ``group_send`` is
logged and does not stop delivery to the rest.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from channels.layers import get_channel_layer

from chat.constants import PRESENCE_CONFIG, REALTIME_CONFIG

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any

logger = logging.getLogger(__name__)

# Layer message type handled by ChatConsumer.chat_event
LAYER_EVENT_TYPE = "chat.event"


def identity_channel(user_id) -> str:
    """Group name carrying every connection of one user."""
    return f"{REALTIME_CONFIG.IDENTITY_GROUP_PREFIX}{user_id}"


class ChannelBroadcaster:
    """
    Send outbound events to channel layer groups.

    Args:
        channel_layer: Layer to use; defaults to the configured default layer
            resolved on each call

    Usage:
        broadcaster = ChannelBroadcaster()
        await broadcaster.to_users([sender_id, receiver_id], events.new_message(msg))
        await broadcaster.to_everyone(event, skip_channel=self.channel_name)
    """

    def __init__(self, channel_layer=None):
        self._channel_layer = channel_layer

    @property
    def channel_layer(self):
        return self._channel_layer or get_channel_layer()

    async def to_groups(
        self,
        groups: Iterable[str],
        event: dict[str, Any],
        skip_channel: str | None = None,
    ) -> list[str]:
        """
        Send one event to each distinct group.

        Returns:
            Groups the send failed for (empty on full success)
        """
        layer = self.channel_layer
        message = {
            "type": LAYER_EVENT_TYPE,
            "event": event,
            "skip_channel": skip_channel,
        }

        failed = []
        for group in dict.fromkeys(groups):
            try:
                await layer.group_send(group, message)
            except Exception:
                logger.exception(
                    f"Fan-out of {event.get('type')} to group {group} failed"
                )
                failed.append(group)
        return failed

    async def to_users(
        self,
        user_ids: Iterable,
        event: dict[str, Any],
        skip_channel: str | None = None,
    ) -> list[str]:
        """Send to the identity channel of each user."""
        return await self.to_groups(
            [identity_channel(user_id) for user_id in user_ids],
            event,
            skip_channel=skip_channel,
        )

    async def to_everyone(
        self, event: dict[str, Any], skip_channel: str | None = None
    ) -> list[str]:
        """Send to every live connection through the presence group."""
        return await self.to_groups(
            [PRESENCE_CONFIG.BROADCAST_GROUP], event, skip_channel=skip_channel
        )

    async def join(self, user_id, channel_name: str) -> None:
        """Add a connection to its identity channel and the presence group."""
        layer = self.channel_layer
        await layer.group_add(identity_channel(user_id), channel_name)
        await layer.group_add(PRESENCE_CONFIG.BROADCAST_GROUP, channel_name)

    async def leave(self, user_id, channel_name: str) -> None:
        """Remove a connection from both groups."""
        layer = self.channel_layer
        await layer.group_discard(identity_channel(user_id), channel_name)
        await layer.group_discard(PRESENCE_CONFIG.BROADCAST_GROUP, channel_name)
