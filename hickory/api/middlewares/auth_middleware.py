# hickory/api/middlewares/auth_middleware.py
from functools import wraps
from typing import Any, Callable, TypeVar

from flask import g, request

from hickory.config.logging_config import bind_request_context
from hickory.core.enums import UserRole
from hickory.core.exceptions import ForbiddenError, UnauthorizedError
from hickory.infrastructure.security.jwt_provider import JwtProvider

F = TypeVar("F", bound=Callable[..., Any])


def _get_bearer_token() -> str:
    auth = request.headers.get("Authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    raise UnauthorizedError("Missing token.")


def require_auth(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = _get_bearer_token()
        claims = JwtProvider().decode(token)

        if claims.get("typ") != "access":
            raise UnauthorizedError("Invalid token.", code="invalid_token")

        g.auth = claims
        bind_request_context(user_id=claims.get("sub"))

        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*allowed_roles: UserRole):
    allowed = {UserRole(r).value for r in allowed_roles}

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not hasattr(g, "auth"):
                raise UnauthorizedError("Missing token.")

            if g.auth.get("role") not in allowed:
                raise ForbiddenError("Access denied.")

            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
