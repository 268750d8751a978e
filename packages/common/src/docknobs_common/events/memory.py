"""In-process event bus."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from .types import Event, Subscription

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """Event bus delivering to handlers in the publishing process.

    ``publish`` awaits each matching handler in subscription order. A handler
    that raises is logged and the remaining handlers still run.

    Example:
        ```python
        bus = InMemoryEventBus()
        await bus.connect()
        subscription = await bus.subscribe("", print, pattern="documents:*")
        await bus.publish("documents:users", Event(EventType.CREATED, "documents:users"))
        await bus.unsubscribe(subscription)
        ```
    """

    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._lock = asyncio.Lock()
        self._connected = False

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def connect(self) -> None:
        self._connected = True
        logger.debug("InMemoryEventBus connected")

    async def close(self) -> None:
        async with self._lock:
            self._subscriptions.clear()
        self._connected = False
        logger.debug("InMemoryEventBus closed")

    async def publish(self, topic: str, event: Event) -> None:
        if not self._connected:
            logger.warning(f"Publishing {event.type.value} on '{topic}' to a disconnected event bus")

        async with self._lock:
            matching = [s for s in self._subscriptions if s.matches(topic)]

        # Handlers run outside the lock so they can subscribe or publish
        for subscription in matching:
            try:
                result = subscription.handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception(
                    f"Event handler {subscription.subscription_id[:8]} failed on '{topic}'"
                )

        logger.debug(f"Published {event.type.value} on '{topic}' to {len(matching)} handler(s)")

    async def subscribe(
        self,
        topic: str,
        handler: Callable[[Event], Any],
        pattern: str | None = None,
    ) -> Subscription:
        """Deliver events on ``topic``, or on topics matching ``pattern``, to ``handler``.

        Args:
            topic: Exact topic to receive
            handler: Sync or async callable taking the event
            pattern: Optional fnmatch pattern used instead of ``topic``
        """
        subscription = Subscription(topic=topic, handler=handler, pattern=pattern)
        async with self._lock:
            self._subscriptions.append(subscription)
        logger.debug(f"Subscribed {subscription.subscription_id[:8]} to '{pattern or topic}'")
        return subscription

    async def unsubscribe(self, subscription: Subscription) -> bool:
        """Stop delivering to ``subscription``; False if it was not active."""
        async with self._lock:
            remaining = [
                s for s in self._subscriptions
                if s.subscription_id != subscription.subscription_id
            ]
            removed = len(remaining) != len(self._subscriptions)
            self._subscriptions = remaining
        return removed
