# hickory/core/exceptions.py


class AppError(Exception):
    # errors whose side effects must survive the failed request (db_session commits)
    commit_session: bool = False

    def __init__(self, message: str, *, status_code: int = 400, code: str = "error") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid input") -> None:
        super().__init__(message, status_code=400, code="validation_error")


class NotFoundError(AppError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status_code=404, code="not_found")


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict", *, code: str = "conflict") -> None:
        super().__init__(message, status_code=409, code=code)


class VersionConflictError(ConflictError):
    """The row version presented by the caller is no longer the stored one."""

    def __init__(
        self,
        message: str = "The ticket was modified by another user. Please refresh and try again.",
    ) -> None:
        super().__init__(message, code="version_conflict")


class InvalidTransitionError(AppError):
    def __init__(self, message: str = "Transition not allowed") -> None:
        super().__init__(message, status_code=422, code="invalid_transition")


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized", *, code: str = "unauthorized") -> None:
        super().__init__(message, status_code=401, code=code)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message, status_code=403, code="forbidden")


# -------- Refresh token failures --------

class RefreshTokenError(UnauthorizedError):
    pass


class InvalidTokenError(RefreshTokenError):
    def __init__(self, message: str = "Invalid refresh token") -> None:
        super().__init__(message, code="invalid_token")


class TokenExpiredError(RefreshTokenError):
    def __init__(self, message: str = "Refresh token expired") -> None:
        super().__init__(message, code="token_expired")


class TokenReuseDetectedError(RefreshTokenError):
    # the family revocation has to be committed before this propagates
    commit_session = True

    def __init__(self, message: str = "Refresh token is no longer valid") -> None:
        super().__init__(message, code="token_reuse_detected")


class AccountInactiveError(RefreshTokenError):
    def __init__(self, message: str = "Account is inactive") -> None:
        super().__init__(message, code="account_inactive")
