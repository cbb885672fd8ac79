# hickory/api/schemas/audit_schema.py
from datetime import datetime

from pydantic import field_serializer

from hickory.api.schemas._base import CamelModel
from hickory.api.schemas._datetime_serializer import serialize_dt
from hickory.infrastructure.database.models.audit_log_model import AuditLogModel


class AuditLogResponse(CamelModel):
    id: int
    occurred_at: datetime
    action: str
    entity_type: str
    entity_id: int | None = None
    user_id: int | None = None
    user_email: str | None = None
    details: str | None = None

    @field_serializer("occurred_at")
    def _ser_dt(self, v: datetime) -> str | None:
        return serialize_dt(v)

    @classmethod
    def from_row(cls, log: AuditLogModel, user_email: str | None) -> "AuditLogResponse":
        return cls(
            id=log.id,
            occurred_at=log.occurred_at,
            action=log.action_name,
            entity_type=log.entity_name,
            entity_id=log.entity_id,
            user_id=log.user_id,
            user_email=user_email,
            details=log.details,
        )


class AuditLogListResponse(CamelModel):
    items: list[AuditLogResponse]
    total: int
    limit: int
    offset: int
