# hickory/entities/auth_result.py
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuthResult:
    access_token: str
    refresh_token: str
    expires_at: datetime
    user_id: int
    email: str
    first_name: str
    last_name: str
    role: str
