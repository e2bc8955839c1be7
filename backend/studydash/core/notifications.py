"""
Data-change notifications: a small publish/subscribe bus.

Services publish after every successful mutation; subscribers (the dashboard
cache, the load tracker) react by invalidating whatever depends on that user's
data. Delivery is synchronous and fire-and-forget.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class DataChange(str, Enum):
    TASK_CREATED = "taskCreated"
    TASK_UPDATED = "taskUpdated"
    TASK_DELETED = "taskDeleted"
    EVENT_CREATED = "eventCreated"
    EVENT_UPDATED = "eventUpdated"
    EVENT_DELETED = "eventDeleted"
    TASKS_CLEARED = "tasksCleared"
    EVENTS_CLEARED = "eventsCleared"
    DATA_REFRESH = "dataRefresh"


@dataclass(frozen=True)
class Notification:
    kind: DataChange
    user_id: str
    payload: dict = field(default_factory=dict)


Handler = Callable[[Notification], None]


class EventBus:
    """Publish/subscribe keyed by DataChange kind."""

    def __init__(self):
        self._handlers: dict[DataChange | None, list[Handler]] = {}

    def subscribe(self, kind: DataChange, handler: Handler) -> Callable[[], None]:
        """Register a handler for one kind. Returns a function that unsubscribes it."""
        return self._add(kind, handler)

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Register a handler for every kind."""
        return self._add(None, handler)

    def _add(self, kind: DataChange | None, handler: Handler) -> Callable[[], None]:
        self._handlers.setdefault(kind, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(kind, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def publish(self, kind: DataChange, user_id: str, payload: dict | None = None) -> int:
        """Deliver a notification. Returns how many handlers ran successfully.

        A failing handler is logged and does not stop delivery to the others.
        """
        note = Notification(kind=kind, user_id=user_id, payload=payload or {})
        handlers = list(self._handlers.get(kind, [])) + list(self._handlers.get(None, []))

        delivered = 0
        for handler in handlers:
            try:
                handler(note)
                delivered += 1
            except Exception as e:
                logger.error(f"Subscriber failed on {kind.value}: {e}", exc_info=True)
        return delivered
