# hickory/repositories/refresh_token_repository.py

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from hickory.core.base_repository import BaseRepository
from hickory.infrastructure.database.models.refresh_token_model import RefreshTokenModel


class RefreshTokenRepository(BaseRepository[RefreshTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_hash(self, token_hash: str) -> RefreshTokenModel | None:
        # revoked and expired rows included: the caller decides what they mean
        stmt = select(RefreshTokenModel).where(RefreshTokenModel.token_hash == token_hash)
        return self._session.execute(stmt).scalar_one_or_none()

    def list_active_for_user(self, user_id: int, *, now: datetime) -> list[RefreshTokenModel]:
        stmt = (
            select(RefreshTokenModel)
            .where(
                RefreshTokenModel.user_id == user_id,
                RefreshTokenModel.revoked_at.is_(None),
                RefreshTokenModel.expires_at > now,
            )
            .order_by(RefreshTokenModel.created_at.asc(), RefreshTokenModel.id.asc())
        )
        return list(self._session.execute(stmt).scalars().all())

    def revoke_if_active(
        self,
        *,
        token_id: int,
        now: datetime,
        reason: str,
        replaced_by_token_hash: str | None = None,
    ) -> bool:
        """Revokes one token unless someone already did. False means another
        request got there first."""
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.id == token_id, RefreshTokenModel.revoked_at.is_(None))
            .values(
                revoked_at=now,
                revoked_reason=reason,
                replaced_by_token_hash=replaced_by_token_hash,
            )
            .execution_options(synchronize_session=False)
        )
        res = self._session.execute(stmt)
        return (res.rowcount or 0) == 1

    def revoke_all_for_user(self, *, user_id: int, now: datetime, reason: str) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.user_id == user_id, RefreshTokenModel.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason)
            .execution_options(synchronize_session=False)
        )
        res = self._session.execute(stmt)
        return int(res.rowcount or 0)
