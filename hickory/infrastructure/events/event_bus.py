# hickory/infrastructure/events/event_bus.py
from __future__ import annotations

from collections import defaultdict
from typing import Callable

import structlog

from hickory.core.interfaces.ticket_events import TicketEvent

logger = structlog.get_logger(__name__)

EventHandler = Callable[[TicketEvent], None]


class InProcessEventBus:
    """Fan-out to subscribers; a handler that raises is logged and skipped."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def publish(self, event: TicketEvent) -> None:
        handlers = self._handlers.get(type(event), [])
        if not handlers:
            return

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "event_handler_failed",
                    event_type=type(event).__name__,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )


class DeferredEventPublisher:
    """Holds events until the caller flushes them after commit."""

    def __init__(self) -> None:
        self._pending: list[TicketEvent] = []

    def publish(self, event: TicketEvent) -> None:
        self._pending.append(event)

    def flush_to(self, bus: InProcessEventBus) -> int:
        events, self._pending = self._pending, []
        for event in events:
            bus.publish(event)
        return len(events)

    def discard(self) -> None:
        self._pending.clear()


event_bus = InProcessEventBus()
