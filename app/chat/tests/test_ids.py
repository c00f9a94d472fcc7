"""
Tests for message id generation.

Message ids double as the timeline ordering, so they must strictly increase
in generation order even when the clock does not.
"""

import threading
import uuid

from chat.ids import MessageIdGenerator, new_message_id


class TestMessageIdGenerator:
    """Test strictly increasing UUIDv7 generation."""

    def test_ids_are_version_7(self):
        """Generated ids are UUIDv7."""
        assert new_message_id().version == 7

    def test_consecutive_ids_increase(self):
        """
        Ids minted back to back compare greater than their predecessor.

        Why it matters: History ordering is ORDER BY id.
        """
        generator = MessageIdGenerator()
        ids = [generator.next_id() for _ in range(500)]

        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_string_order_matches_uuid_order(self):
        """Ids sort the same way as strings, which is how clients compare them."""
        generator = MessageIdGenerator()
        ids = [generator.next_id() for _ in range(100)]

        assert sorted(str(i) for i in ids) == [str(i) for i in ids]

    def test_repeated_factory_value_is_bumped(self):
        """
        Given: A clock that keeps returning the same id
        When: Two ids are generated
        Then: The second is the first plus one
        """
        fixed = uuid.UUID("01890a5d-ac96-774b-bcce-b302099a8057")
        generator = MessageIdGenerator(factory=lambda: fixed)

        first = generator.next_id()
        second = generator.next_id()

        assert first == fixed
        assert second.int == fixed.int + 1

    def test_clock_step_back_still_increases(self):
        """An earlier id from the factory never produces a smaller id."""
        later = uuid.UUID("01890a5d-ac96-774b-bcce-b302099a8057")
        earlier = uuid.UUID("01890a5d-ac90-774b-bcce-b302099a8057")
        values = iter([later, earlier])
        generator = MessageIdGenerator(factory=lambda: next(values))

        first = generator.next_id()
        second = generator.next_id()

        assert second > first

    def test_concurrent_generation_has_no_duplicates(self):
        """Ids minted from several threads stay unique."""
        generator = MessageIdGenerator()
        results = []
        lock = threading.Lock()

        def mint():
            batch = [generator.next_id() for _ in range(200)]
            with lock:
                results.extend(batch)

        threads = [threading.Thread(target=mint) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 800
