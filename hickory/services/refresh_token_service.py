# hickory/services/refresh_token_service.py

from datetime import timedelta

import structlog

from hickory.config.settings import settings
from hickory.core.clock import utcnow
from hickory.core.exceptions import (
    AccountInactiveError,
    InvalidTokenError,
    TokenExpiredError,
    TokenReuseDetectedError,
)
from hickory.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from hickory.infrastructure.database.models.user_model import UserModel
from hickory.infrastructure.security.refresh_token_generator import (
    generate_refresh_token,
    hash_token,
    token_preview,
)
from hickory.repositories.refresh_token_repository import RefreshTokenRepository
from hickory.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

REASON_ROTATED = "Replaced by new token"
REASON_REUSE = "Token reuse detected"
REASON_LOGOUT = "User logout"


class RefreshTokenService:
    """Opaque refresh tokens, rotated on every use; a revoked token revokes the family."""

    def __init__(
        self,
        *,
        repo: RefreshTokenRepository,
        user_repo: UserRepository,
        lifetime_days: int | None = None,
        max_active_sessions: int | None = None,
    ) -> None:
        self._repo = repo
        self._user_repo = user_repo
        self._lifetime = timedelta(days=lifetime_days or settings.refresh_token_days)
        self._max_active = max_active_sessions or settings.max_active_sessions

    def issue(self, *, user_id: int, enforce_session_limit: bool = False) -> str:
        now = utcnow()

        if enforce_session_limit:
            active = self._repo.list_active_for_user(user_id, now=now)
            if len(active) >= self._max_active:
                oldest = active[0]
                self._repo.revoke_if_active(
                    token_id=oldest.id,
                    now=now,
                    reason=f"Exceeded maximum active sessions ({self._max_active})",
                )
                logger.info("refresh_token_session_limit", user_id=user_id, revoked_id=oldest.id)

        token = generate_refresh_token()
        self._repo.add(
            RefreshTokenModel(
                user_id=user_id,
                token_hash=hash_token(token),
                created_at=now,
                expires_at=now + self._lifetime,
            )
        )
        return token

    def rotate(self, *, refresh_token: str) -> tuple[UserModel, str]:
        """Returns (user, new_refresh_token); the presented token is spent."""
        stored = self._repo.get_by_hash(hash_token(refresh_token or ""))
        if stored is None:
            logger.warning(
                "refresh_token_not_found",
                token_preview=token_preview(refresh_token),
                token_length=len(refresh_token or ""),
            )
            raise InvalidTokenError()

        if not stored.is_active:
            if stored.is_revoked:
                self._revoke_family(stored.user_id)
                raise TokenReuseDetectedError()
            logger.info("refresh_token_expired", user_id=stored.user_id)
            raise TokenExpiredError()

        user = self._user_repo.get_by_id(stored.user_id)
        if user is None:
            raise InvalidTokenError()
        if not user.is_active:
            logger.warning("refresh_inactive_user", user_id=user.id)
            raise AccountInactiveError()

        now = utcnow()
        new_token = generate_refresh_token()
        new_hash = hash_token(new_token)

        # a concurrent refresh with the same token loses here and is treated as reuse
        rotated = self._repo.revoke_if_active(
            token_id=stored.id,
            now=now,
            reason=REASON_ROTATED,
            replaced_by_token_hash=new_hash,
        )
        if not rotated:
            self._revoke_family(stored.user_id)
            raise TokenReuseDetectedError()

        self._repo.add(
            RefreshTokenModel(
                user_id=user.id,
                token_hash=new_hash,
                created_at=now,
                expires_at=now + self._lifetime,
            )
        )

        logger.info("refresh_token_rotated", user_id=user.id)
        return user, new_token

    def revoke_all(self, *, user_id: int, reason: str = REASON_LOGOUT) -> int:
        count = self._repo.revoke_all_for_user(user_id=user_id, now=utcnow(), reason=reason)
        logger.info("refresh_tokens_revoked", user_id=user_id, count=count, reason=reason)
        return count

    def _revoke_family(self, user_id: int) -> None:
        logger.warning("token_reuse_detected", user_id=user_id)
        self.revoke_all(user_id=user_id, reason=REASON_REUSE)
