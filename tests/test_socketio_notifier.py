# tests/test_socketio_notifier.py
import pytest

from hickory.core.interfaces.ticket_events import CommentAddedEvent, TicketAssignedEvent
from hickory.infrastructure.events.event_bus import InProcessEventBus
from hickory.infrastructure.realtime import socketio_ticket_notifier
from hickory.infrastructure.realtime.socketio_ticket_notifier import SocketIOTicketNotifier


@pytest.fixture
def emitted(monkeypatch):
    calls = []

    def fake_emit(event, payload, room=None, **kwargs):
        calls.append((event, room, payload))

    monkeypatch.setattr(socketio_ticket_notifier.socketio, "emit", fake_emit)
    return calls


def _comment(is_internal: bool) -> CommentAddedEvent:
    return CommentAddedEvent(
        comment_id=1,
        ticket_id=5,
        ticket_number="TKT-00005",
        ticket_title="Monitor flickers",
        comment_content="Swapped the cable",
        is_internal=is_internal,
        author_id=2,
        author_name="Ann Agent",
        author_email="ann@example.com",
        submitter_id=3,
        submitter_name="Carla User",
        submitter_email="carla@example.com",
        created_at_iso="2026-01-01T00:00:00+00:00",
    )


def test_internal_note_only_reaches_staff(emitted):
    SocketIOTicketNotifier().notify_comment_added(_comment(is_internal=True))
    assert [(e, r) for e, r, _ in emitted] == [("comment:added", "staff")]


def test_public_comment_goes_to_ticket_room(emitted):
    SocketIOTicketNotifier().notify_comment_added(_comment(is_internal=False))
    assert [(e, r) for e, r, _ in emitted] == [("comment:added", "ticket:5")]


def test_assignment_reaches_ticket_room_and_assignee(emitted):
    bus = InProcessEventBus()
    SocketIOTicketNotifier().register(bus)

    bus.publish(
        TicketAssignedEvent(
            ticket_id=5,
            ticket_number="TKT-00005",
            title="Monitor flickers",
            submitter_id=3,
            submitter_name="Carla User",
            submitter_email="carla@example.com",
            assigned_to_id=2,
            assigned_to_name="Ann Agent",
            assigned_to_email="ann@example.com",
            assigned_by_id=9,
            assigned_by_name="Ada Admin",
            assigned_by_email="ada@example.com",
            assigned_at_iso="2026-01-01T00:00:00+00:00",
        )
    )

    assert [(e, r) for e, r, _ in emitted] == [("ticket:assigned", "ticket:5"), ("ticket:assigned", "user:2")]
    assert emitted[0][2]["assigned_to_email"] == "ann@example.com"
