# hickory/api/routes/auth_routes.py
import structlog
from flask import Blueprint, g, jsonify, request

from hickory.api.middlewares.auth_middleware import require_auth
from hickory.api.schemas.auth_schema import AuthResponse, LoginRequest, RefreshRequest, RegisterRequest
from hickory.core.audit.audit_actions import AuditAction
from hickory.core.audit.audit_entities import AuditEntity
from hickory.core.exceptions import RefreshTokenError, UnauthorizedError
from hickory.infrastructure.database.session import db_session
from hickory.infrastructure.security.jwt_provider import JwtProvider
from hickory.repositories.audit_log_repository import AuditLogRepository
from hickory.repositories.refresh_token_repository import RefreshTokenRepository
from hickory.repositories.user_repository import UserRepository
from hickory.services.audit_service import AuditService
from hickory.services.auth_service import AuthService
from hickory.services.refresh_token_service import RefreshTokenService
from hickory.services.user_service import UserService

logger = structlog.get_logger(__name__)

bp_auth = Blueprint("auth", __name__)


def _build_service(session) -> AuthService:
    user_repo = UserRepository(session)
    return AuthService(
        jwt_provider=JwtProvider(),
        user_service=UserService(user_repo),
        refresh_service=RefreshTokenService(repo=RefreshTokenRepository(session), user_repo=user_repo),
    )


def _audit_failure(*, action: AuditAction, details: str) -> None:
    # the failed request's own transaction is gone; record in a fresh one
    with db_session() as session:
        AuditService(AuditLogRepository(session)).log(
            entity=AuditEntity.AUTH,
            action=action,
            user_id=None,
            details=details,
        )


@bp_auth.post("/register")
def register():
    payload = RegisterRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        result = _build_service(session).register(
            email=payload.email,
            password=payload.password,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        AuditService(AuditLogRepository(session)).log(
            entity=AuditEntity.USER,
            entity_id=result.user_id,
            action=AuditAction.REGISTER,
            user_id=result.user_id,
        )

    return jsonify(AuthResponse.from_result(result).to_json()), 201


@bp_auth.post("/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(force=True))

    try:
        with db_session() as session:
            result = _build_service(session).login(email=payload.email, password=payload.password)
            AuditService(AuditLogRepository(session)).log(
                entity=AuditEntity.AUTH,
                action=AuditAction.LOGIN_SUCCESS,
                user_id=result.user_id,
            )
    except UnauthorizedError as err:
        _audit_failure(action=AuditAction.LOGIN_FAILED, details=f"email={payload.email}; code={err.code}")
        raise

    return jsonify(AuthResponse.from_result(result).to_json()), 200


@bp_auth.post("/refresh")
def refresh():
    payload = RefreshRequest.model_validate(request.get_json(force=True))

    try:
        with db_session() as session:
            result = _build_service(session).refresh(refresh_token=payload.refresh_token)
            AuditService(AuditLogRepository(session)).log(
                entity=AuditEntity.AUTH,
                action=AuditAction.REFRESH_SUCCESS,
                user_id=result.user_id,
            )
    except RefreshTokenError as err:
        # clients are not told which check failed
        logger.info("refresh_rejected", code=err.code)
        _audit_failure(action=AuditAction.REFRESH_FAILED, details=f"code={err.code}")
        raise UnauthorizedError("Session expired. Please log in again.", code="session_expired") from err

    return jsonify(AuthResponse.from_result(result).to_json()), 200


@bp_auth.post("/logout")
@require_auth
def logout():
    user_id = int(g.auth["sub"])

    with db_session() as session:
        revoked = _build_service(session).logout(user_id=user_id)
        AuditService(AuditLogRepository(session)).log(
            entity=AuditEntity.AUTH,
            action=AuditAction.LOGOUT,
            user_id=user_id,
            details=f"revoked_sessions={revoked}",
        )

    return ("", 204)
