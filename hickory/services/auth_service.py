# hickory/services/auth_service.py

import structlog

from hickory.entities.auth_result import AuthResult
from hickory.infrastructure.database.models.user_model import UserModel
from hickory.infrastructure.security.jwt_provider import JwtProvider
from hickory.services.refresh_token_service import RefreshTokenService
from hickory.services.user_service import UserService

logger = structlog.get_logger(__name__)


class AuthService:
    def __init__(
        self,
        *,
        jwt_provider: JwtProvider,
        user_service: UserService,
        refresh_service: RefreshTokenService,
    ) -> None:
        self._jwt = jwt_provider
        self._users = user_service
        self._refresh = refresh_service

    def register(self, *, email: str, password: str, first_name: str, last_name: str) -> AuthResult:
        user = self._users.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
        )
        logger.info("user_registered", user_id=user.id)
        refresh = self._refresh.issue(user_id=user.id)
        return self._result(user, refresh)

    def login(self, *, email: str, password: str) -> AuthResult:
        user = self._users.authenticate(email=email, password=password)
        refresh = self._refresh.issue(user_id=user.id, enforce_session_limit=True)
        logger.info("user_logged_in", user_id=user.id)
        return self._result(user, refresh)

    def refresh(self, *, refresh_token: str) -> AuthResult:
        user, new_refresh = self._refresh.rotate(refresh_token=refresh_token)
        return self._result(user, new_refresh)

    def logout(self, *, user_id: int) -> int:
        return self._refresh.revoke_all(user_id=user_id)

    def _result(self, user: UserModel, refresh_token: str) -> AuthResult:
        access, expires_at = self._jwt.issue_access_token(user)
        return AuthResult(
            access_token=access,
            refresh_token=refresh_token,
            expires_at=expires_at,
            user_id=int(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )
