# hickory/services/audit_report_service.py

from datetime import datetime

from hickory.core.audit.audit_actions import AuditAction
from hickory.core.audit.audit_entities import AuditEntity
from hickory.infrastructure.database.models.audit_log_model import AuditLogModel
from hickory.repositories.audit_log_repository import AuditLogRepository


class AuditReportService:
    def __init__(self, repo: AuditLogRepository) -> None:
        self._repo = repo

    def list_logs(
        self,
        *,
        limit: int,
        offset: int,
        entity: AuditEntity | None = None,
        entity_id: int | None = None,
        action: AuditAction | None = None,
        user_id: int | None = None,
        occurred_from: datetime | None = None,
        occurred_to: datetime | None = None,
    ) -> tuple[list[tuple[AuditLogModel, str | None]], int]:
        return self._repo.list_logs(
            limit=limit,
            offset=offset,
            entity_name=entity.value if entity else None,
            entity_id=entity_id,
            action_name=action.value if action else None,
            user_id=user_id,
            occurred_from=occurred_from,
            occurred_to=occurred_to,
        )

    @staticmethod
    def list_actions() -> list[str]:
        return [a.value for a in AuditAction]
