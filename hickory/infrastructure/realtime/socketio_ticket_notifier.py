# hickory/infrastructure/realtime/socketio_ticket_notifier.py
from __future__ import annotations

from dataclasses import asdict

from hickory.core.interfaces.ticket_events import (
    CommentAddedEvent,
    TicketAssignedEvent,
    TicketCreatedEvent,
    TicketUpdatedEvent,
)
from hickory.infrastructure.events.event_bus import InProcessEventBus
from hickory.infrastructure.realtime.socketio_server import socketio


def _room(ticket_id: int) -> str:
    return f"ticket:{ticket_id}"


class SocketIOTicketNotifier:
    """Realtime subscriber: pushes ticket events to the web front end."""

    def register(self, bus: InProcessEventBus) -> None:
        bus.subscribe(TicketCreatedEvent, self.notify_ticket_created)
        bus.subscribe(TicketUpdatedEvent, self.notify_ticket_updated)
        bus.subscribe(TicketAssignedEvent, self.notify_ticket_assigned)
        bus.subscribe(CommentAddedEvent, self.notify_comment_added)

    def notify_ticket_created(self, event: TicketCreatedEvent) -> None:
        # new tickets feed the agent queue, no room yet
        socketio.emit("ticket:created", asdict(event))

    def notify_ticket_updated(self, event: TicketUpdatedEvent) -> None:
        payload = asdict(event)
        payload["changed_fields"] = list(event.changed_fields)

        socketio.emit("ticket:updated", payload, room=_room(event.ticket_id))
        socketio.emit("ticket:updated", payload)

    def notify_ticket_assigned(self, event: TicketAssignedEvent) -> None:
        payload = asdict(event)
        socketio.emit("ticket:assigned", payload, room=_room(event.ticket_id))
        socketio.emit("ticket:assigned", payload, room=f"user:{event.assigned_to_id}")

    def notify_comment_added(self, event: CommentAddedEvent) -> None:
        payload = asdict(event)
        if event.is_internal:
            # internal notes only reach the staff room
            socketio.emit("comment:added", payload, room="staff")
            return
        socketio.emit("comment:added", payload, room=_room(event.ticket_id))
