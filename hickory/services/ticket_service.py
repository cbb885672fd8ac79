# hickory/services/ticket_service.py

from datetime import timezone

import structlog

from hickory.core.clock import utcnow
from hickory.core.enums import STAFF_ROLES, TicketPriority, TicketStatus, UserRole
from hickory.core.exceptions import (
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    VersionConflictError,
)
from hickory.core.interfaces.ticket_events import (
    EventPublisher,
    TicketAssignedEvent,
    TicketCreatedEvent,
    TicketUpdatedEvent,
)
from hickory.core.row_version import INITIAL_ROW_VERSION, next_row_version
from hickory.infrastructure.database.models.ticket_model import TicketModel
from hickory.repositories.ticket_repository import TicketRepository
from hickory.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

RESOLUTION_NOTES_MIN = 10
RESOLUTION_NOTES_MAX = 5000


def _iso(dt) -> str:
    if dt is None:
        return ""
    return dt.replace(tzinfo=timezone.utc).isoformat()


class TicketService:
    """Ticket reads and the row-version-guarded mutations."""

    def __init__(
        self,
        *,
        ticket_repo: TicketRepository,
        user_repo: UserRepository,
        publisher: EventPublisher | None = None,
    ) -> None:
        self._ticket_repo = ticket_repo
        self._user_repo = user_repo
        self._publisher = publisher

    # -------- Events --------
    def _publish(self, event) -> None:
        if not self._publisher:
            return
        self._publisher.publish(event)

    def _emit_updated(self, *, ticket: TicketModel, actor_id: int, changed_fields: tuple[str, ...]) -> None:
        if not self._publisher:
            return

        users = self._user_repo.get_map_by_ids([ticket.submitter_id, ticket.assigned_to_id, actor_id])
        submitter = users.get(int(ticket.submitter_id))
        assignee = users.get(int(ticket.assigned_to_id)) if ticket.assigned_to_id is not None else None
        actor = users.get(int(actor_id))

        self._publish(
            TicketUpdatedEvent(
                ticket_id=int(ticket.id),
                ticket_number=ticket.ticket_number,
                title=ticket.title,
                status=ticket.status,
                priority=ticket.priority,
                submitter_id=int(ticket.submitter_id),
                submitter_name=submitter.full_name if submitter else "Unknown",
                submitter_email=submitter.email if submitter else "",
                updated_by_id=int(actor_id),
                updated_by_name=actor.full_name if actor else "Unknown",
                updated_by_email=actor.email if actor else "",
                updated_at_iso=_iso(ticket.updated_at),
                changed_fields=changed_fields,
                assigned_to_id=int(assignee.id) if assignee else None,
                assigned_to_name=assignee.full_name if assignee else None,
                assigned_to_email=assignee.email if assignee else None,
            )
        )

    # -------- Guards --------
    def _get_or_404(self, ticket_id: int) -> TicketModel:
        ticket = self._ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise NotFoundError(f"Ticket {ticket_id} not found.")
        return ticket

    def _ensure_current_version(self, ticket: TicketModel, expected_version: bytes) -> None:
        if bytes(ticket.row_version) != bytes(expected_version):
            logger.info("ticket_version_conflict", ticket_id=ticket.id)
            raise VersionConflictError()

    def _ensure_not_terminal(self, ticket: TicketModel, action: str) -> None:
        status = TicketStatus(ticket.status)
        if status.is_terminal:
            raise InvalidTransitionError(f"Cannot {action} a {status.value} ticket.")

    def _apply(self, ticket: TicketModel, *, expected_version: bytes, values: dict) -> TicketModel:
        values = {
            **values,
            "updated_at": utcnow(),
            "row_version": next_row_version(bytes(ticket.row_version)),
        }
        ok = self._ticket_repo.update_if_version(
            int(ticket.id), expected_version=bytes(expected_version), values=values
        )
        if not ok:
            # someone committed between our read and the conditional write
            logger.info("ticket_version_conflict", ticket_id=ticket.id, stage="write")
            raise VersionConflictError()

        updated = self._ticket_repo.get_by_id(int(ticket.id), refresh=True)
        if updated is None:
            raise NotFoundError(f"Ticket {ticket.id} not found.")
        return updated

    # -------- Reads --------
    def create_ticket(
        self,
        *,
        submitter_id: int,
        title: str,
        description: str,
        priority: TicketPriority = TicketPriority.MEDIUM,
    ) -> TicketModel:
        title = (title or "").strip()
        description = (description or "").strip()
        if not 5 <= len(title) <= 200:
            raise ValidationError("Title must be between 5 and 200 characters.")
        if not 10 <= len(description) <= 10000:
            raise ValidationError("Description must be between 10 and 10000 characters.")

        submitter = self._user_repo.get_by_id(submitter_id)
        if submitter is None:
            raise NotFoundError("User not found.")

        now = utcnow()
        ticket = self._ticket_repo.add(
            TicketModel(
                ticket_number=self._ticket_repo.next_ticket_number(),
                title=title,
                description=description,
                status=TicketStatus.OPEN.value,
                priority=TicketPriority(priority).value,
                submitter_id=submitter_id,
                assigned_to_id=None,
                created_at=now,
                updated_at=now,
                row_version=INITIAL_ROW_VERSION,
            )
        )
        logger.info("ticket_created", ticket_id=ticket.id, ticket_number=ticket.ticket_number)

        self._publish(
            TicketCreatedEvent(
                ticket_id=int(ticket.id),
                ticket_number=ticket.ticket_number,
                title=ticket.title,
                description=ticket.description,
                status=ticket.status,
                priority=ticket.priority,
                submitter_id=int(submitter.id),
                submitter_name=submitter.full_name,
                submitter_email=submitter.email,
                created_at_iso=_iso(ticket.created_at),
            )
        )
        return ticket

    def get_ticket(self, *, ticket_id: int, user_id: int, role: str) -> TicketModel:
        ticket = self._get_or_404(ticket_id)
        if UserRole(role) not in STAFF_ROLES and int(ticket.submitter_id) != int(user_id):
            raise ForbiddenError("Access denied.")
        return ticket

    def list_for_submitter(self, *, user_id: int, limit: int = 50, offset: int = 0) -> list[TicketModel]:
        return self._ticket_repo.list_by_submitter(user_id, limit=limit, offset=offset)

    def list_queue(self, *, agent_id: int, limit: int = 50, offset: int = 0) -> list[TicketModel]:
        return self._ticket_repo.list_queue(agent_id, limit=limit, offset=offset)

    # -------- Mutations --------
    def assign(self, *, ticket_id: int, agent_id: int, expected_version: bytes, actor_id: int) -> TicketModel:
        ticket = self._get_or_404(ticket_id)

        # field edits report staleness first; the refreshed read shows the real state
        self._ensure_current_version(ticket, expected_version)
        self._ensure_not_terminal(ticket, "assign")

        agent = self._user_repo.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError(f"Agent {agent_id} not found.")
        if UserRole(agent.role) not in STAFF_ROLES:
            raise ValidationError("User must have Agent or Administrator role.")

        values: dict = {"assigned_to_id": int(agent.id)}
        if TicketStatus(ticket.status) == TicketStatus.OPEN:
            values["status"] = TicketStatus.IN_PROGRESS.value

        updated = self._apply(ticket, expected_version=expected_version, values=values)
        logger.info("ticket_assigned", ticket_id=updated.id, agent_id=agent.id)

        if self._publisher:
            users = self._user_repo.get_map_by_ids([updated.submitter_id, actor_id])
            submitter = users.get(int(updated.submitter_id))
            actor = users.get(int(actor_id))
            self._publish(
                TicketAssignedEvent(
                    ticket_id=int(updated.id),
                    ticket_number=updated.ticket_number,
                    title=updated.title,
                    submitter_id=int(updated.submitter_id),
                    submitter_name=submitter.full_name if submitter else "Unknown",
                    submitter_email=submitter.email if submitter else "",
                    assigned_to_id=int(agent.id),
                    assigned_to_name=agent.full_name,
                    assigned_to_email=agent.email,
                    assigned_by_id=int(actor_id),
                    assigned_by_name=actor.full_name if actor else "Unknown",
                    assigned_by_email=actor.email if actor else "",
                    assigned_at_iso=_iso(updated.updated_at),
                )
            )
        return updated

    def change_status(
        self,
        *,
        ticket_id: int,
        new_status: TicketStatus,
        expected_version: bytes,
        actor_id: int,
    ) -> TicketModel:
        new_status = TicketStatus(new_status)
        if new_status == TicketStatus.CLOSED:
            raise InvalidTransitionError("Use the close operation to close a ticket with resolution notes.")

        ticket = self._get_or_404(ticket_id)

        # terminal tickets reject status changes whatever version is presented
        self._ensure_not_terminal(ticket, "change the status of")
        self._ensure_current_version(ticket, expected_version)

        updated = self._apply(ticket, expected_version=expected_version, values={"status": new_status.value})
        logger.info("ticket_status_changed", ticket_id=updated.id, status=updated.status)

        self._emit_updated(ticket=updated, actor_id=actor_id, changed_fields=("status",))
        return updated

    def change_priority(
        self,
        *,
        ticket_id: int,
        new_priority: TicketPriority,
        expected_version: bytes,
        actor_id: int,
    ) -> TicketModel:
        new_priority = TicketPriority(new_priority)
        ticket = self._get_or_404(ticket_id)

        self._ensure_current_version(ticket, expected_version)
        self._ensure_not_terminal(ticket, "change the priority of")

        updated = self._apply(ticket, expected_version=expected_version, values={"priority": new_priority.value})
        logger.info("ticket_priority_changed", ticket_id=updated.id, priority=updated.priority)

        self._emit_updated(ticket=updated, actor_id=actor_id, changed_fields=("priority",))
        return updated

    def close(
        self,
        *,
        ticket_id: int,
        resolution_notes: str,
        expected_version: bytes,
        actor_id: int,
    ) -> TicketModel:
        # validated before any read or write
        notes = (resolution_notes or "").strip()
        if len(notes) < RESOLUTION_NOTES_MIN:
            raise ValidationError(f"Resolution notes must be at least {RESOLUTION_NOTES_MIN} characters.")
        if len(notes) > RESOLUTION_NOTES_MAX:
            raise ValidationError(f"Resolution notes cannot exceed {RESOLUTION_NOTES_MAX} characters.")

        ticket = self._get_or_404(ticket_id)

        self._ensure_not_terminal(ticket, "close")
        self._ensure_current_version(ticket, expected_version)

        now = utcnow()
        updated = self._apply(
            ticket,
            expected_version=expected_version,
            values={
                "status": TicketStatus.CLOSED.value,
                "resolution_notes": notes,
                "closed_at": now,
            },
        )
        logger.info("ticket_closed", ticket_id=updated.id)

        self._emit_updated(ticket=updated, actor_id=actor_id, changed_fields=("status", "resolution_notes"))
        return updated
