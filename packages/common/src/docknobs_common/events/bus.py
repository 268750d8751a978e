"""EventBus protocol and backend selection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from docknobs_common.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .types import Event, Subscription


@runtime_checkable
class EventBus(Protocol):
    """Publish-subscribe interface models announce their writes on.

    A model with a bus attached publishes ``created``, ``updated`` and
    ``deleted`` events on ``documents:<collection path>``.
    """

    async def connect(self) -> None:
        ...

    async def close(self) -> None:
        """Drop every subscription."""
        ...

    async def publish(self, topic: str, event: Event) -> None:
        ...

    async def subscribe(
        self,
        topic: str,
        handler: Callable[[Event], Any],
        pattern: str | None = None,
    ) -> Subscription:
        ...

    async def unsubscribe(self, subscription: Subscription) -> bool:
        ...


def create_event_bus(config: dict[str, Any]) -> EventBus:
    """Create an event bus from configuration.

    Args:
        config: Configuration dict; ``backend`` defaults to ``"memory"``

    Raises:
        ConfigurationError: If the backend is not recognized
    """
    from .memory import InMemoryEventBus

    backend = config.get("backend", "memory")
    if backend == "memory":
        return InMemoryEventBus()

    raise ConfigurationError(
        f"Unknown event bus backend: {backend}. Available backends: memory",
        context={"backend": backend},
    )
