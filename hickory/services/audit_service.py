# hickory/services/audit_service.py

from hickory.core.audit.audit_actions import AuditAction
from hickory.core.audit.audit_entities import AuditEntity
from hickory.core.clock import utcnow
from hickory.infrastructure.database.models.audit_log_model import AuditLogModel
from hickory.repositories.audit_log_repository import AuditLogRepository


class AuditService:
    def __init__(self, repo: AuditLogRepository) -> None:
        self._repo = repo

    def log(
        self,
        *,
        entity: AuditEntity,
        action: AuditAction,
        user_id: int | None,
        entity_id: int | None = None,
        details: str | None = None,
    ) -> AuditLogModel:
        # stored as plain strings so the admin filters compare against enum values
        return self._repo.add(
            AuditLogModel(
                entity_name=AuditEntity(entity).value,
                entity_id=entity_id,
                action_name=AuditAction(action).value,
                details=details,
                user_id=user_id,
                occurred_at=utcnow(),
            )
        )
