# hickory/api/realtime/socket_handlers.py
from __future__ import annotations

import structlog
from flask import request
from flask_socketio import disconnect, join_room, leave_room

from hickory.core.enums import STAFF_ROLES, UserRole
from hickory.core.exceptions import UnauthorizedError
from hickory.infrastructure.database.session import db_session
from hickory.infrastructure.realtime.socketio_server import socketio
from hickory.infrastructure.security.jwt_provider import JwtProvider
from hickory.repositories.ticket_repository import TicketRepository

logger = structlog.get_logger(__name__)


def _get_bearer_token() -> str | None:
    # 1) Authorization: Bearer <token>
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip()

    # 2) querystring ?token=...
    token = request.args.get("token")
    if token:
        return str(token).strip()

    return None


def _can_watch(ticket_id: int) -> bool:
    role = request.environ.get("auth_role")
    if role in {r.value for r in STAFF_ROLES}:
        return True

    with db_session() as session:
        ticket = TicketRepository(session).get_by_id(ticket_id)
        return ticket is not None and int(ticket.submitter_id) == request.environ.get("auth_user_id")


def register_socket_handlers() -> None:
    @socketio.on("connect")
    def on_connect():
        token = _get_bearer_token()
        if not token:
            return disconnect()

        try:
            claims = JwtProvider().decode(token)
        except UnauthorizedError:
            return disconnect()

        user_id = int(claims["sub"])
        role = str(claims.get("role", ""))
        request.environ["auth_user_id"] = user_id
        request.environ["auth_role"] = role

        join_room(f"user:{user_id}")
        if role in {r.value for r in STAFF_ROLES}:
            join_room("staff")

        logger.debug("socket_connected", user_id=user_id, staff=role != UserRole.END_USER.value)

    @socketio.on("ticket:join")
    def on_join(data: dict):
        ticket_id = int(data.get("ticket_id"))
        if not _can_watch(ticket_id):
            return
        join_room(f"ticket:{ticket_id}")
        socketio.emit("ticket:joined", {"ticket_id": ticket_id}, to=request.sid)

    @socketio.on("ticket:leave")
    def on_leave(data: dict):
        ticket_id = int(data.get("ticket_id"))
        leave_room(f"ticket:{ticket_id}")
        socketio.emit("ticket:left", {"ticket_id": ticket_id}, to=request.sid)
