"""
Connection-derived presence registry.

Tracks, per user id, the set of live websocket channel names. A user is
online iff that set is non-empty. Every mutation reports whether it crossed
the online/offline boundary so that callers broadcast exactly once per
transition.

Backends:
    InMemoryPresenceRegistry: Process-local; single-process deployments and tests
    RedisPresenceRegistry: Shared across ASGI workers via django-redis

Selection:
    settings.CHAT_PRESENCE_BACKEND = "memory" | "redis"

Usage:
    registry = get_presence_registry()
    if await registry.register(user_id, self.channel_name):
        ...  # first connection, user just came online
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache

from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from chat.constants import PRESENCE_CONFIG

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """
    Interface for presence backends.

    All operations are atomic per user.
    """

    async def register(self, user_id, channel_name: str) -> bool:
        """
        Add a live connection for a user.

        Returns:
            True if this was the user's first connection (offline -> online).
            Registering an already-registered channel returns False.
        """
        raise NotImplementedError

    async def deregister(self, user_id, channel_name: str) -> bool:
        """
        Remove a connection for a user.

        Returns:
            True if the user has no connections left and this call removed
            the last one (online -> offline). Unknown channels return False.
        """
        raise NotImplementedError

    async def active_connections(self, user_id) -> frozenset[str]:
        raise NotImplementedError

    async def is_online(self, user_id) -> bool:
        return bool(await self.active_connections(user_id))


class InMemoryPresenceRegistry(PresenceRegistry):
    """Dict of sets guarded by a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._connections: dict[str, set[str]] = {}

    async def register(self, user_id, channel_name: str) -> bool:
        key = str(user_id)
        with self._lock:
            channels = self._connections.setdefault(key, set())
            was_offline = not channels
            channels.add(channel_name)
            return was_offline

    async def deregister(self, user_id, channel_name: str) -> bool:
        key = str(user_id)
        with self._lock:
            channels = self._connections.get(key)
            if not channels or channel_name not in channels:
                return False
            channels.discard(channel_name)
            if channels:
                return False
            del self._connections[key]
            return True

    async def active_connections(self, user_id) -> frozenset[str]:
        with self._lock:
            return frozenset(self._connections.get(str(user_id), ()))

    def clear(self) -> None:
        with self._lock:
            self._connections.clear()


class RedisPresenceRegistry(PresenceRegistry):
    """
    Redis-backed registry (one set per user).

    Lua scripts make add+count and remove+count a single atomic step, so two
    workers racing on the same user cannot both observe the transition.

    Known limitation: keys carry no TTL. A worker that dies without running
    disconnect leaves its channel names behind until the user's next clean
    disconnect of that channel.
    """

    # Keys: [user_connections_key]
    # Args: [channel_name]
    # Returns 1 when the set went from empty to one member
    LUA_REGISTER = """
    local added = redis.call('SADD', KEYS[1], ARGV[1])
    local count = redis.call('SCARD', KEYS[1])
    if added == 1 and count == 1 then
        return 1
    end
    return 0
    """

    # Keys: [user_connections_key]
    # Args: [channel_name]
    # Returns 1 when this call removed the last member
    LUA_DEREGISTER = """
    local removed = redis.call('SREM', KEYS[1], ARGV[1])
    local count = redis.call('SCARD', KEYS[1])
    if removed == 1 and count == 0 then
        return 1
    end
    return 0
    """

    def __init__(self, alias: str = "default", redis_client=None):
        self.alias = alias
        self._client = redis_client
        self._lua_register = None
        self._lua_deregister = None

    def _get_redis_client(self):
        """
        Get raw Redis client for Lua script execution.

        Returns Redis client from django-redis.
        """
        if self._client is None:
            from django_redis import get_redis_connection

            self._client = get_redis_connection(self.alias)
        return self._client

    def _scripts(self):
        client = self._get_redis_client()
        if self._lua_register is None:
            self._lua_register = client.register_script(self.LUA_REGISTER)
            self._lua_deregister = client.register_script(self.LUA_DEREGISTER)
        return self._lua_register, self._lua_deregister

    @staticmethod
    def _key(user_id) -> str:
        """Build Redis key for a user's connection set."""
        return f"{PRESENCE_CONFIG.KEY_PREFIX_USER_CONNECTIONS}:{user_id}"

    def _register_sync(self, user_id, channel_name: str) -> bool:
        lua_register, _ = self._scripts()
        return bool(lua_register(keys=[self._key(user_id)], args=[channel_name]))

    def _deregister_sync(self, user_id, channel_name: str) -> bool:
        _, lua_deregister = self._scripts()
        return bool(lua_deregister(keys=[self._key(user_id)], args=[channel_name]))

    def _members_sync(self, user_id) -> frozenset[str]:
        members = self._get_redis_client().smembers(self._key(user_id))
        return frozenset(
            m.decode() if isinstance(m, bytes) else m for m in members
        )

    async def register(self, user_id, channel_name: str) -> bool:
        return await sync_to_async(self._register_sync)(user_id, channel_name)

    async def deregister(self, user_id, channel_name: str) -> bool:
        return await sync_to_async(self._deregister_sync)(user_id, channel_name)

    async def active_connections(self, user_id) -> frozenset[str]:
        return await sync_to_async(self._members_sync)(user_id)


@lru_cache(maxsize=1)
def get_presence_registry() -> PresenceRegistry:
    """
    Process-wide registry selected by settings.CHAT_PRESENCE_BACKEND.

    Raises:
        ImproperlyConfigured: Unknown backend name
    """
    backend = getattr(settings, "CHAT_PRESENCE_BACKEND", "memory")
    if backend == "memory":
        registry = InMemoryPresenceRegistry()
    elif backend == "redis":
        registry = RedisPresenceRegistry()
    else:
        raise ImproperlyConfigured(
            f"CHAT_PRESENCE_BACKEND must be 'memory' or 'redis', got {backend!r}"
        )
    logger.info(f"Presence registry backend: {registry.__class__.__name__}")
    return registry
