# hickory/infrastructure/security/refresh_token_generator.py
import hashlib
import secrets

REFRESH_TOKEN_BYTES = 32  # 256 bits


def generate_refresh_token() -> str:
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def token_preview(token: str | None) -> str:
    # only ever log the first 8 characters
    token = token or ""
    visible = min(8, len(token))
    return token[:visible] + "*" * max(0, len(token) - visible)
