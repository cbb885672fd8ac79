# hickory/core/interfaces/ticket_events.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class TicketCreatedEvent:
    ticket_id: int
    ticket_number: str
    title: str
    description: str
    status: str
    priority: str
    submitter_id: int
    submitter_name: str
    submitter_email: str
    created_at_iso: str

    assigned_to_id: int | None = None
    assigned_to_name: str | None = None
    assigned_to_email: str | None = None


@dataclass(frozen=True)
class TicketUpdatedEvent:
    ticket_id: int
    ticket_number: str
    title: str
    status: str
    priority: str
    submitter_id: int
    submitter_name: str
    submitter_email: str
    updated_by_id: int
    updated_by_name: str
    updated_by_email: str
    updated_at_iso: str

    changed_fields: tuple[str, ...] = field(default_factory=tuple)
    assigned_to_id: int | None = None
    assigned_to_name: str | None = None
    assigned_to_email: str | None = None


@dataclass(frozen=True)
class TicketAssignedEvent:
    ticket_id: int
    ticket_number: str
    title: str
    submitter_id: int
    submitter_name: str
    submitter_email: str
    assigned_to_id: int
    assigned_to_name: str
    assigned_to_email: str
    assigned_by_id: int
    assigned_by_name: str
    assigned_by_email: str
    assigned_at_iso: str


@dataclass(frozen=True)
class CommentAddedEvent:
    comment_id: int
    ticket_id: int
    ticket_number: str
    ticket_title: str
    comment_content: str
    is_internal: bool
    author_id: int
    author_name: str
    author_email: str
    submitter_id: int
    submitter_name: str
    submitter_email: str
    created_at_iso: str

    assigned_to_id: int | None = None
    assigned_to_name: str | None = None
    assigned_to_email: str | None = None


TicketEvent = TicketCreatedEvent | TicketUpdatedEvent | TicketAssignedEvent | CommentAddedEvent


class EventPublisher(Protocol):
    def publish(self, event: TicketEvent) -> None:
        ...
