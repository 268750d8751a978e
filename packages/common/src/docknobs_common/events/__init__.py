"""Document lifecycle events.

Example:
    ```python
    from docknobs_common.events import Event, create_event_bus

    bus = create_event_bus({"backend": "memory"})
    await bus.connect()

    async def on_write(event: Event) -> None:
        print(f"{event.type.value}: {event.payload['path']}")

    subscription = await bus.subscribe("documents:users", on_write)
    ```
"""

from __future__ import annotations

from .bus import EventBus, create_event_bus
from .memory import InMemoryEventBus
from .types import Event, EventType, Subscription

__all__ = [
    "EventBus",
    "create_event_bus",
    "Event",
    "EventType",
    "Subscription",
    "InMemoryEventBus",
]
