# hickory/services/comment_service.py

from datetime import timezone

import structlog

from hickory.core.clock import utcnow
from hickory.core.enums import STAFF_ROLES, UserRole
from hickory.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from hickory.core.interfaces.ticket_events import CommentAddedEvent, EventPublisher
from hickory.infrastructure.database.models.comment_model import CommentModel
from hickory.repositories.comment_repository import CommentRepository
from hickory.repositories.ticket_repository import TicketRepository
from hickory.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

CONTENT_MAX = 5000


class CommentService:
    def __init__(
        self,
        *,
        comment_repo: CommentRepository,
        ticket_repo: TicketRepository,
        user_repo: UserRepository,
        publisher: EventPublisher | None = None,
    ) -> None:
        self._comment_repo = comment_repo
        self._ticket_repo = ticket_repo
        self._user_repo = user_repo
        self._publisher = publisher

    def _visible_ticket(self, ticket_id: int, *, user_id: int, is_staff: bool):
        ticket = self._ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found.")
        if not is_staff and int(ticket.submitter_id) != int(user_id):
            raise ForbiddenError("Access denied.")
        return ticket

    def add_comment(
        self,
        *,
        ticket_id: int,
        author_id: int,
        role: str,
        content: str,
        is_internal: bool = False,
    ) -> CommentModel:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Comment content is required.")
        if len(content) > CONTENT_MAX:
            raise ValidationError(f"Comment cannot exceed {CONTENT_MAX} characters.")

        is_staff = UserRole(role) in STAFF_ROLES
        ticket = self._visible_ticket(ticket_id, user_id=author_id, is_staff=is_staff)

        # end users never write internal notes
        internal = bool(is_internal) and is_staff

        now = utcnow()
        comment = self._comment_repo.add(
            CommentModel(
                ticket_id=int(ticket.id),
                author_id=int(author_id),
                content=content,
                is_internal=internal,
                created_at=now,
                updated_at=None,
            )
        )
        logger.info("comment_added", ticket_id=ticket.id, comment_id=comment.id, internal=internal)

        if self._publisher:
            users = self._user_repo.get_map_by_ids([author_id, ticket.submitter_id, ticket.assigned_to_id])
            author = users.get(int(author_id))
            submitter = users.get(int(ticket.submitter_id))
            assignee = users.get(int(ticket.assigned_to_id)) if ticket.assigned_to_id is not None else None

            self._publisher.publish(
                CommentAddedEvent(
                    comment_id=int(comment.id),
                    ticket_id=int(ticket.id),
                    ticket_number=ticket.ticket_number,
                    ticket_title=ticket.title,
                    comment_content=comment.content,
                    is_internal=comment.is_internal,
                    author_id=int(author_id),
                    author_name=author.full_name if author else "Unknown",
                    author_email=author.email if author else "",
                    submitter_id=int(ticket.submitter_id),
                    submitter_name=submitter.full_name if submitter else "Unknown",
                    submitter_email=submitter.email if submitter else "",
                    created_at_iso=comment.created_at.replace(tzinfo=timezone.utc).isoformat(),
                    assigned_to_id=int(assignee.id) if assignee else None,
                    assigned_to_name=assignee.full_name if assignee else None,
                    assigned_to_email=assignee.email if assignee else None,
                )
            )
        return comment

    def list_comments(self, *, ticket_id: int, user_id: int, role: str) -> list[CommentModel]:
        is_staff = UserRole(role) in STAFF_ROLES
        self._visible_ticket(ticket_id, user_id=user_id, is_staff=is_staff)
        return self._comment_repo.list_by_ticket(ticket_id, include_internal=is_staff)
