# hickory/services/user_service.py

import structlog

from hickory.core.clock import utcnow
from hickory.core.enums import UserRole
from hickory.core.exceptions import ConflictError, UnauthorizedError
from hickory.infrastructure.database.models.user_model import UserModel
from hickory.infrastructure.security.password_hasher import PasswordHasher
from hickory.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)


class UserService:
    def __init__(self, user_repository: UserRepository) -> None:
        self._user_repository = user_repository

    def create_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.END_USER,
    ) -> UserModel:
        normalized = email.strip().lower()
        if self._user_repository.get_by_email(normalized) is not None:
            logger.warning("registration_email_taken", email=normalized)
            raise ConflictError("Email already registered.")

        password_hash, password_salt, algo, iterations = PasswordHasher.hash_password(password)

        model = UserModel(
            email=normalized,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=UserRole(role).value,
            password_algo=algo,
            password_iterations=iterations,
            password_hash=password_hash,
            password_salt=password_salt,
            is_active=True,
            created_at=utcnow(),
            last_login_at=None,
        )
        return self._user_repository.add(model)

    def authenticate(self, *, email: str, password: str) -> UserModel:
        user = self._user_repository.get_by_email(email.strip().lower())
        if user is None:
            logger.warning("login_unknown_email", email=email)
            raise UnauthorizedError("Invalid email or password.", code="invalid_credentials")

        if not user.is_active:
            logger.warning("login_inactive_user", user_id=user.id)
            raise UnauthorizedError("Account is inactive.", code="account_inactive")

        ok = PasswordHasher.verify_password(
            password,
            password_hash=user.password_hash,
            password_salt=user.password_salt,
            iterations=user.password_iterations,
            algo=user.password_algo,
        )
        if not ok:
            logger.warning("login_invalid_password", user_id=user.id)
            raise UnauthorizedError("Invalid email or password.", code="invalid_credentials")

        user.last_login_at = utcnow()
        return user
