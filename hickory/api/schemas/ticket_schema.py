# hickory/api/schemas/ticket_schema.py
from datetime import datetime

from pydantic import Field, field_serializer

from hickory.api.schemas._base import CamelModel
from hickory.api.schemas._datetime_serializer import serialize_dt
from hickory.core.enums import TicketPriority, TicketStatus
from hickory.core.row_version import encode_row_version
from hickory.infrastructure.database.models.comment_model import CommentModel
from hickory.infrastructure.database.models.ticket_model import TicketModel


# -------- Requests --------

class CreateTicketRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10000)
    priority: TicketPriority = TicketPriority.MEDIUM


class _VersionedRequest(CamelModel):
    # base64 of the version returned by the last read
    row_version: str = Field(min_length=1)


class AssignTicketRequest(_VersionedRequest):
    agent_id: int = Field(gt=0)


class ChangeStatusRequest(_VersionedRequest):
    status: TicketStatus


class ChangePriorityRequest(_VersionedRequest):
    priority: TicketPriority


class CloseTicketRequest(_VersionedRequest):
    # length rules live in TicketService.close
    resolution_notes: str = ""


class CreateCommentRequest(CamelModel):
    content: str = Field(min_length=1, max_length=5000)
    is_internal: bool = False


# -------- Responses --------

class TicketResponse(CamelModel):
    id: int
    ticket_number: str
    title: str
    description: str
    status: str
    priority: str
    submitter_id: int
    assigned_to_id: int | None = None
    resolution_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    row_version: str

    @field_serializer("created_at", "updated_at", "closed_at")
    def _ser_dt(self, v: datetime | None) -> str | None:
        return serialize_dt(v)

    @classmethod
    def from_model(cls, t: TicketModel) -> "TicketResponse":
        return cls(
            id=t.id,
            ticket_number=t.ticket_number,
            title=t.title,
            description=t.description,
            status=t.status,
            priority=t.priority,
            submitter_id=t.submitter_id,
            assigned_to_id=t.assigned_to_id,
            resolution_notes=t.resolution_notes,
            created_at=t.created_at,
            updated_at=t.updated_at,
            closed_at=t.closed_at,
            row_version=encode_row_version(bytes(t.row_version)),
        )


class TicketListResponse(CamelModel):
    items: list[TicketResponse]
    limit: int
    offset: int


class CommentResponse(CamelModel):
    id: int
    ticket_id: int
    author_id: int
    content: str
    is_internal: bool
    created_at: datetime
    updated_at: datetime | None = None

    @field_serializer("created_at", "updated_at")
    def _ser_dt(self, v: datetime | None) -> str | None:
        return serialize_dt(v)

    @classmethod
    def from_model(cls, c: CommentModel) -> "CommentResponse":
        return cls(
            id=c.id,
            ticket_id=c.ticket_id,
            author_id=c.author_id,
            content=c.content,
            is_internal=c.is_internal,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )
