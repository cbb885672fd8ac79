# hickory/api/routes/ticket_routes.py

from flask import Blueprint, g, jsonify, request

from hickory.api.middlewares.auth_middleware import require_auth, require_roles
from hickory.api.schemas.ticket_schema import (
    AssignTicketRequest,
    ChangePriorityRequest,
    ChangeStatusRequest,
    CloseTicketRequest,
    CommentResponse,
    CreateCommentRequest,
    CreateTicketRequest,
    TicketListResponse,
    TicketResponse,
)
from hickory.core.audit.audit_actions import AuditAction
from hickory.core.audit.audit_entities import AuditEntity
from hickory.core.enums import STAFF_ROLES
from hickory.core.row_version import decode_row_version
from hickory.infrastructure.database.session import db_session
from hickory.infrastructure.events.event_bus import DeferredEventPublisher, event_bus
from hickory.repositories.audit_log_repository import AuditLogRepository
from hickory.repositories.comment_repository import CommentRepository
from hickory.repositories.ticket_repository import TicketRepository
from hickory.repositories.user_repository import UserRepository
from hickory.services.audit_service import AuditService
from hickory.services.comment_service import CommentService
from hickory.services.ticket_service import TicketService

bp_tickets = Blueprint("tickets", __name__)


# -------------------------
# Helpers
# -------------------------

def _auth_user() -> tuple[int, str]:
    auth = getattr(g, "auth", None)
    return int(auth["sub"]), str(auth["role"])


def _build_service(session, publisher: DeferredEventPublisher) -> TicketService:
    return TicketService(
        ticket_repo=TicketRepository(session),
        user_repo=UserRepository(session),
        publisher=publisher,
    )


def _build_comment_service(session, publisher: DeferredEventPublisher) -> CommentService:
    return CommentService(
        comment_repo=CommentRepository(session),
        ticket_repo=TicketRepository(session),
        user_repo=UserRepository(session),
        publisher=publisher,
    )


def _build_audit(session) -> AuditService:
    return AuditService(AuditLogRepository(session))


def _paging() -> tuple[int, int]:
    limit = min(max(request.args.get("limit", 50, type=int), 1), 200)
    offset = max(request.args.get("offset", 0, type=int), 0)
    return limit, offset


# -------------------------
# Tickets
# -------------------------

@bp_tickets.post("")
@require_auth
def create_ticket():
    user_id, _ = _auth_user()
    payload = CreateTicketRequest.model_validate(request.get_json(force=True))
    publisher = DeferredEventPublisher()

    with db_session() as session:
        ticket = _build_service(session, publisher).create_ticket(
            submitter_id=user_id,
            title=payload.title,
            description=payload.description,
            priority=payload.priority,
        )
        _build_audit(session).log(
            entity=AuditEntity.TICKET,
            entity_id=ticket.id,
            action=AuditAction.CREATED,
            user_id=user_id,
            details=f"ticket_number={ticket.ticket_number}",
        )
        body = TicketResponse.from_model(ticket).to_json()

    publisher.flush_to(event_bus)
    return jsonify(body), 201


@bp_tickets.get("")
@require_auth
def list_my_tickets():
    user_id, _ = _auth_user()
    limit, offset = _paging()

    with db_session() as session:
        tickets = _build_service(session, DeferredEventPublisher()).list_for_submitter(
            user_id=user_id, limit=limit, offset=offset
        )
        body = TicketListResponse(
            items=[TicketResponse.from_model(t) for t in tickets],
            limit=limit,
            offset=offset,
        ).to_json()

    return jsonify(body), 200


@bp_tickets.get("/queue")
@require_auth
@require_roles(*STAFF_ROLES)
def list_queue():
    user_id, _ = _auth_user()
    limit, offset = _paging()

    with db_session() as session:
        tickets = _build_service(session, DeferredEventPublisher()).list_queue(
            agent_id=user_id, limit=limit, offset=offset
        )
        body = TicketListResponse(
            items=[TicketResponse.from_model(t) for t in tickets],
            limit=limit,
            offset=offset,
        ).to_json()

    return jsonify(body), 200


@bp_tickets.get("/<int:ticket_id>")
@require_auth
def get_ticket(ticket_id: int):
    user_id, role = _auth_user()

    with db_session() as session:
        ticket = _build_service(session, DeferredEventPublisher()).get_ticket(
            ticket_id=ticket_id, user_id=user_id, role=role
        )
        body = TicketResponse.from_model(ticket).to_json()

    return jsonify(body), 200


# -------------------------
# Versioned mutations
# -------------------------

@bp_tickets.put("/<int:ticket_id>/assign")
@require_auth
@require_roles(*STAFF_ROLES)
def assign_ticket(ticket_id: int):
    user_id, _ = _auth_user()
    payload = AssignTicketRequest.model_validate(request.get_json(force=True))
    expected = decode_row_version(payload.row_version)
    publisher = DeferredEventPublisher()

    with db_session() as session:
        ticket = _build_service(session, publisher).assign(
            ticket_id=ticket_id,
            agent_id=payload.agent_id,
            expected_version=expected,
            actor_id=user_id,
        )
        _build_audit(session).log(
            entity=AuditEntity.TICKET,
            entity_id=ticket_id,
            action=AuditAction.ASSIGNED,
            user_id=user_id,
            details=f"agent_id={payload.agent_id}",
        )
        body = TicketResponse.from_model(ticket).to_json()

    publisher.flush_to(event_bus)
    return jsonify(body), 200


@bp_tickets.put("/<int:ticket_id>/status")
@require_auth
@require_roles(*STAFF_ROLES)
def change_status(ticket_id: int):
    user_id, _ = _auth_user()
    payload = ChangeStatusRequest.model_validate(request.get_json(force=True))
    expected = decode_row_version(payload.row_version)
    publisher = DeferredEventPublisher()

    with db_session() as session:
        ticket = _build_service(session, publisher).change_status(
            ticket_id=ticket_id,
            new_status=payload.status,
            expected_version=expected,
            actor_id=user_id,
        )
        _build_audit(session).log(
            entity=AuditEntity.TICKET,
            entity_id=ticket_id,
            action=AuditAction.STATUS_CHANGED,
            user_id=user_id,
            details=f"status={ticket.status}",
        )
        body = TicketResponse.from_model(ticket).to_json()

    publisher.flush_to(event_bus)
    return jsonify(body), 200


@bp_tickets.put("/<int:ticket_id>/priority")
@require_auth
@require_roles(*STAFF_ROLES)
def change_priority(ticket_id: int):
    user_id, _ = _auth_user()
    payload = ChangePriorityRequest.model_validate(request.get_json(force=True))
    expected = decode_row_version(payload.row_version)
    publisher = DeferredEventPublisher()

    with db_session() as session:
        ticket = _build_service(session, publisher).change_priority(
            ticket_id=ticket_id,
            new_priority=payload.priority,
            expected_version=expected,
            actor_id=user_id,
        )
        _build_audit(session).log(
            entity=AuditEntity.TICKET,
            entity_id=ticket_id,
            action=AuditAction.PRIORITY_CHANGED,
            user_id=user_id,
            details=f"priority={ticket.priority}",
        )
        body = TicketResponse.from_model(ticket).to_json()

    publisher.flush_to(event_bus)
    return jsonify(body), 200


@bp_tickets.post("/<int:ticket_id>/close")
@require_auth
@require_roles(*STAFF_ROLES)
def close_ticket(ticket_id: int):
    user_id, _ = _auth_user()
    payload = CloseTicketRequest.model_validate(request.get_json(force=True))
    expected = decode_row_version(payload.row_version)
    publisher = DeferredEventPublisher()

    with db_session() as session:
        ticket = _build_service(session, publisher).close(
            ticket_id=ticket_id,
            resolution_notes=payload.resolution_notes,
            expected_version=expected,
            actor_id=user_id,
        )
        _build_audit(session).log(
            entity=AuditEntity.TICKET,
            entity_id=ticket_id,
            action=AuditAction.CLOSED,
            user_id=user_id,
        )
        body = TicketResponse.from_model(ticket).to_json()

    publisher.flush_to(event_bus)
    return jsonify(body), 200


# -------------------------
# Comments
# -------------------------

@bp_tickets.get("/<int:ticket_id>/comments")
@require_auth
def list_comments(ticket_id: int):
    user_id, role = _auth_user()

    with db_session() as session:
        comments = _build_comment_service(session, DeferredEventPublisher()).list_comments(
            ticket_id=ticket_id, user_id=user_id, role=role
        )
        body = [CommentResponse.from_model(c).to_json() for c in comments]

    return jsonify(body), 200


@bp_tickets.post("/<int:ticket_id>/comments")
@require_auth
def add_comment(ticket_id: int):
    user_id, role = _auth_user()
    payload = CreateCommentRequest.model_validate(request.get_json(force=True))
    publisher = DeferredEventPublisher()

    with db_session() as session:
        comment = _build_comment_service(session, publisher).add_comment(
            ticket_id=ticket_id,
            author_id=user_id,
            role=role,
            content=payload.content,
            is_internal=payload.is_internal,
        )
        _build_audit(session).log(
            entity=AuditEntity.COMMENT,
            entity_id=comment.id,
            action=AuditAction.CREATED,
            user_id=user_id,
            details=f"ticket_id={ticket_id}; internal={comment.is_internal}",
        )
        body = CommentResponse.from_model(comment).to_json()

    publisher.flush_to(event_bus)
    return jsonify(body), 201
