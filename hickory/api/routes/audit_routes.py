# hickory/api/routes/audit_routes.py
from datetime import datetime, timezone

from flask import Blueprint, jsonify, request

from hickory.api.middlewares.auth_middleware import require_auth, require_roles
from hickory.api.schemas.audit_schema import AuditLogListResponse, AuditLogResponse
from hickory.core.audit.audit_actions import AuditAction
from hickory.core.audit.audit_entities import AuditEntity
from hickory.core.enums import UserRole
from hickory.core.exceptions import ValidationError
from hickory.infrastructure.database.session import db_session
from hickory.repositories.audit_log_repository import AuditLogRepository
from hickory.services.audit_report_service import AuditReportService

bp_audit = Blueprint("audit", __name__)


def _parse_dt(name: str) -> datetime | None:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as err:
        raise ValidationError(f"{name} must be an ISO-8601 date/time") from err
    # stored values are naive UTC
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def _parse_int(name: str) -> int | None:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as err:
        raise ValidationError(f"{name} must be an integer") from err


def _parse_enum(name: str, enum_cls):
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError as err:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{name} must be one of: {allowed}") from err


@bp_audit.get("")
@require_auth
@require_roles(UserRole.ADMINISTRATOR)
def list_audit_logs():
    limit = min(max(request.args.get("limit", 50, type=int), 1), 100)
    offset = max(request.args.get("offset", 0, type=int), 0)

    occurred_from = _parse_dt("fromDate")
    occurred_to = _parse_dt("toDate")
    if occurred_from and occurred_to and occurred_from > occurred_to:
        raise ValidationError("fromDate must not be after toDate")

    with db_session() as session:
        rows, total = AuditReportService(AuditLogRepository(session)).list_logs(
            limit=limit,
            offset=offset,
            entity=_parse_enum("entityType", AuditEntity),
            entity_id=_parse_int("entityId"),
            action=_parse_enum("action", AuditAction),
            user_id=_parse_int("userId"),
            occurred_from=occurred_from,
            occurred_to=occurred_to,
        )
        items = [AuditLogResponse.from_row(log, email) for log, email in rows]

    body = AuditLogListResponse(items=items, total=total, limit=limit, offset=offset)
    return jsonify(body.to_json()), 200


@bp_audit.get("/actions")
@require_auth
@require_roles(UserRole.ADMINISTRATOR)
def list_audit_actions():
    return jsonify(AuditReportService.list_actions()), 200
