# hickory/repositories/audit_log_repository.py

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hickory.core.base_repository import BaseRepository
from hickory.infrastructure.database.models.audit_log_model import AuditLogModel
from hickory.infrastructure.database.models.user_model import UserModel


class AuditLogRepository(BaseRepository[AuditLogModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def list_for_entity(self, *, entity_name: str, entity_id: int, limit: int = 100) -> list[AuditLogModel]:
        stmt = (
            select(AuditLogModel)
            .where(AuditLogModel.entity_name == entity_name, AuditLogModel.entity_id == entity_id)
            .order_by(AuditLogModel.id.asc())
            .limit(limit)
        )
        return list(self._session.execute(stmt).scalars().all())

    def list_logs(
        self,
        *,
        limit: int,
        offset: int,
        entity_name: str | None = None,
        entity_id: int | None = None,
        action_name: str | None = None,
        user_id: int | None = None,
        occurred_from: datetime | None = None,
        occurred_to: datetime | None = None,
    ) -> tuple[list[tuple[AuditLogModel, str | None]], int]:
        """Newest first, each row paired with the acting user's email."""
        filters = []
        if entity_name:
            filters.append(AuditLogModel.entity_name == entity_name)
        if entity_id is not None:
            filters.append(AuditLogModel.entity_id == entity_id)
        if action_name:
            filters.append(AuditLogModel.action_name == action_name)
        if user_id is not None:
            filters.append(AuditLogModel.user_id == user_id)
        if occurred_from is not None:
            filters.append(AuditLogModel.occurred_at >= occurred_from)
        if occurred_to is not None:
            filters.append(AuditLogModel.occurred_at <= occurred_to)

        total = self._session.execute(
            select(func.count()).select_from(AuditLogModel).where(*filters)
        ).scalar_one()

        stmt = (
            select(AuditLogModel, UserModel.email)
            .outerjoin(UserModel, UserModel.id == AuditLogModel.user_id)
            .where(*filters)
            .order_by(AuditLogModel.occurred_at.desc(), AuditLogModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = [(log, email) for log, email in self._session.execute(stmt).all()]
        return rows, int(total)
