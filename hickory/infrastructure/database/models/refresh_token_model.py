# hickory/infrastructure/database/models/refresh_token_model.py

from datetime import datetime

from sqlalchemy import CHAR, BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from hickory.core.clock import utcnow
from hickory.infrastructure.database.base_model import BaseModel, BigIntPk


class RefreshTokenModel(BaseModel):
    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(BigIntPk, primary_key=True)

    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)

    # sha256 of the opaque token; the raw value is never stored
    token_hash: Mapped[str] = mapped_column(CHAR(64), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    revoked_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    replaced_by_token_hash: Mapped[str] = mapped_column(CHAR(64), nullable=True)
    revoked_reason: Mapped[str] = mapped_column(String(100), nullable=True)

    @property
    def is_expired(self) -> bool:
        return utcnow() >= self.expires_at

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_active(self) -> bool:
        return not self.is_revoked and not self.is_expired
