"""
Time-sortable message identifiers.

Message ids are UUIDv7: the leading 48 bits are a millisecond timestamp, so
ids sort by creation time both as UUIDs and as strings. Two ids minted in
the same millisecond are ordered by the generator itself, which never hands
out an id that is not greater than the previous one.
"""

from __future__ import annotations

import threading
import uuid

from uuid_extensions import uuid7


class MessageIdGenerator:
    """
    Strictly increasing UUIDv7 generator.

    Thread-safe: sync ORM work runs on a thread pool under Channels, so
    several sends may mint ids concurrently.

    Usage:
        generator = MessageIdGenerator()
        first = generator.next_id()
        second = generator.next_id()
        assert first < second
    """

    def __init__(self, factory=uuid7):
        self._factory = factory
        self._lock = threading.Lock()
        self._last: uuid.UUID | None = None

    def next_id(self) -> uuid.UUID:
        with self._lock:
            candidate = self._factory()
            if self._last is not None and candidate <= self._last:
                # Same-millisecond collision or clock step back
                candidate = uuid.UUID(int=self._last.int + 1)
            self._last = candidate
            return candidate


_generator = MessageIdGenerator()


def new_message_id() -> uuid.UUID:
    """Model field default for Message.id."""
    return _generator.next_id()
