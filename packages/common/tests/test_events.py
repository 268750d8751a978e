"""Tests for the event bus abstraction."""

import logging
from datetime import datetime

import pytest

from docknobs_common.events import (
    Event,
    EventBus,
    EventType,
    InMemoryEventBus,
    Subscription,
    create_event_bus,
)
from docknobs_common.exceptions import ConfigurationError


def created(topic="documents:users"):
    return Event(type=EventType.CREATED, topic=topic)


class TestEvent:
    """Tests for the Event dataclass."""

    def test_lifecycle_types(self):
        assert [t.value for t in EventType] == ["created", "updated", "deleted"]

    def test_create_event(self):
        event = Event(
            type=EventType.UPDATED,
            topic="documents:users",
            payload={"id": "ada", "path": "users/ada", "changed": ["name"]},
            source="User",
        )

        assert event.type == EventType.UPDATED
        assert event.payload["changed"] == ["name"]
        assert event.source == "User"
        assert isinstance(event.timestamp, datetime)
        assert event.timestamp.tzinfo is not None

    def test_defaults(self):
        first, second = created(), created()

        assert first.payload == {}
        assert first.source is None
        assert first.event_id != second.event_id


class TestSubscription:
    """Tests for topic and pattern matching."""

    def test_exact_topic(self):
        subscription = Subscription(topic="documents:users", handler=print)
        assert subscription.matches("documents:users")
        assert not subscription.matches("documents:posts")

    def test_pattern_replaces_topic(self):
        subscription = Subscription(topic="", handler=print, pattern="documents:*")
        assert subscription.matches("documents:posts")
        assert not subscription.matches("")
        assert not subscription.matches("Documents:posts")


class TestCreateEventBus:
    """Tests for the event bus factory."""

    def test_memory_backend(self):
        bus = create_event_bus({"backend": "memory"})
        assert isinstance(bus, InMemoryEventBus)
        assert isinstance(bus, EventBus)

    def test_default_backend(self):
        assert isinstance(create_event_bus({}), InMemoryEventBus)

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError) as exc_info:
            create_event_bus({"backend": "redis"})
        assert exc_info.value.context["backend"] == "redis"


class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    @pytest.mark.asyncio
    async def test_publish_to_topic(self):
        """Test that only subscribers of the published topic receive the event."""
        bus = InMemoryEventBus()
        await bus.connect()
        received = []

        async def handler(event):
            received.append(event)

        await bus.subscribe("documents:users", handler)
        await bus.publish("documents:users", created("documents:users"))
        await bus.publish("documents:posts", created("documents:posts"))

        assert [e.topic for e in received] == ["documents:users"]
        await bus.close()

    @pytest.mark.asyncio
    async def test_sync_handler(self):
        bus = InMemoryEventBus()
        await bus.connect()
        received = []

        await bus.subscribe("documents:users", received.append)
        await bus.publish("documents:users", created())

        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_subscription_order(self):
        """Test that topic and pattern handlers run in the order they subscribed."""
        bus = InMemoryEventBus()
        await bus.connect()
        calls = []

        await bus.subscribe("", lambda event: calls.append("pattern"), pattern="documents:*")
        await bus.subscribe("documents:users", lambda event: calls.append("topic"))
        await bus.publish("documents:users", created())

        assert calls == ["pattern", "topic"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = InMemoryEventBus()
        await bus.connect()
        received = []

        subscription = await bus.subscribe("documents:users", received.append)
        assert bus.subscription_count == 1

        assert await bus.unsubscribe(subscription)
        assert not await bus.unsubscribe(subscription)
        await bus.publish("documents:users", created())

        assert received == []
        assert bus.subscription_count == 0

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, caplog):
        """Test that a raising handler is logged and the next one still runs."""
        bus = InMemoryEventBus()
        await bus.connect()
        received = []

        def broken(event):
            raise RuntimeError("handler failure")

        await bus.subscribe("documents:users", broken)
        await bus.subscribe("documents:users", received.append)
        with caplog.at_level(logging.ERROR, logger="docknobs_common.events.memory"):
            await bus.publish("documents:users", created())

        assert len(received) == 1
        assert "failed on 'documents:users'" in caplog.text

    @pytest.mark.asyncio
    async def test_publish_while_disconnected_warns(self, caplog):
        bus = InMemoryEventBus()
        with caplog.at_level(logging.WARNING, logger="docknobs_common.events.memory"):
            await bus.publish("documents:users", created())
        assert "disconnected" in caplog.text

    @pytest.mark.asyncio
    async def test_close_drops_subscriptions(self):
        bus = InMemoryEventBus()
        await bus.connect()
        await bus.subscribe("documents:users", lambda event: None)
        await bus.close()

        assert bus.subscription_count == 0
