# hickory/infrastructure/security/jwt_provider.py

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from hickory.config.settings import settings
from hickory.core.exceptions import UnauthorizedError
from hickory.infrastructure.database.models.user_model import UserModel


class JwtProvider:
    """Issues and validates the short-lived access token.

    Access tokens carry identity and role claims and are verified statelessly
    (signature, issuer, audience, expiry); there is no server-side revocation.
    """

    def __init__(
        self,
        *,
        secret: str | None = None,
        issuer: str | None = None,
        audience: str | None = None,
        access_minutes: int | None = None,
    ) -> None:
        self._secret = secret or settings.jwt_secret
        self._issuer = issuer or settings.jwt_issuer
        self._audience = audience or settings.jwt_audience
        self._access_minutes = access_minutes or settings.jwt_access_minutes
        self._algorithm = "HS256"

    @property
    def access_minutes(self) -> int:
        return self._access_minutes

    def issue_access_token(self, user: UserModel) -> tuple[str, datetime]:
        now = datetime.now(tz=timezone.utc)
        exp = now + timedelta(minutes=self._access_minutes)

        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": str(user.id),
            "email": user.email,
            "given_name": user.first_name,
            "family_name": user.last_name,
            "role": user.role,
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "jti": uuid4().hex,
            "typ": "access",
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return token, exp.replace(tzinfo=None)

    def decode(self, token: str) -> dict:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub", "jti", "typ"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedError("Token expired.", code="token_expired") from e
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError("Invalid token.", code="invalid_token") from e
