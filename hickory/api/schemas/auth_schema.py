# hickory/api/schemas/auth_schema.py
from datetime import datetime

from pydantic import EmailStr, Field, field_serializer

from hickory.api.schemas._base import CamelModel
from hickory.api.schemas._datetime_serializer import serialize_dt
from hickory.entities.auth_result import AuthResult


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=200)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(min_length=1)


class AuthResponse(CamelModel):
    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: int
    email: str
    first_name: str
    last_name: str
    role: str
    token_type: str = "Bearer"

    @field_serializer("expires_at")
    def _ser_expires_at(self, v: datetime) -> str | None:
        return serialize_dt(v)

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            expires_at=result.expires_at,
            user_id=result.user_id,
            email=result.email,
            first_name=result.first_name,
            last_name=result.last_name,
            role=result.role,
        )
