"""Messages and subscription handles carried by the event bus."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from fnmatch import fnmatchcase
from typing import Any


class EventType(Enum):
    """What happened to a stored document."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class Event:
    """A document lifecycle notification.

    Models publish on ``documents:<collection path>`` with a payload of
    ``{"id", "path", "changed"}``, where ``changed`` lists the dot-paths the
    write validated.

    Attributes:
        type: What happened
        topic: Topic the event was published on
        payload: Event data
        source: Name of the publisher, e.g. the Model subclass
        timestamp: When the event was created, in UTC
        event_id: Unique id of this event
    """

    type: EventType
    topic: str
    payload: dict[str, Any] = field(default_factory=dict)
    source: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(frozen=True)
class Subscription:
    """Handle returned by ``subscribe``; pass it to ``unsubscribe`` to stop delivery.

    A subscription with a ``pattern`` matches topics by fnmatch syntax and
    ignores ``topic``.
    """

    topic: str
    handler: Callable[[Event], Any] = field(repr=False)
    pattern: str | None = None
    subscription_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def matches(self, topic: str) -> bool:
        if self.pattern is not None:
            return fnmatchcase(topic, self.pattern)
        return topic == self.topic
