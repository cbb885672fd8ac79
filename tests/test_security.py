# tests/test_security.py
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from hickory.core.clock import utcnow
from hickory.core.exceptions import UnauthorizedError, ValidationError
from hickory.core.row_version import (
    INITIAL_ROW_VERSION,
    decode_row_version,
    encode_row_version,
    next_row_version,
)
from hickory.infrastructure.database.models.user_model import UserModel
from hickory.infrastructure.security.jwt_provider import JwtProvider
from hickory.infrastructure.security.password_hasher import PasswordHasher
from hickory.infrastructure.security.refresh_token_generator import (
    generate_refresh_token,
    hash_token,
    token_preview,
)


def _user() -> UserModel:
    return UserModel(id=7, email="ann@example.com", first_name="Ann", last_name="Agent", role="Agent")


# -------- row version --------

def test_next_row_version_is_strictly_increasing():
    v = INITIAL_ROW_VERSION
    seen = {v}
    for _ in range(50):
        v = next_row_version(v)
        assert v not in seen
        seen.add(v)
    assert all(len(x) == 8 for x in seen)


def test_row_version_travels_as_base64():
    assert encode_row_version(INITIAL_ROW_VERSION) == "AAAAAAAAAAE="
    assert decode_row_version("AAAAAAAAAAE=") == INITIAL_ROW_VERSION


@pytest.mark.parametrize("bad", ["", "not base64!", "AAAA*AAA", "é"])
def test_malformed_row_version_is_a_validation_error(bad):
    with pytest.raises(ValidationError):
        decode_row_version(bad)


# -------- access tokens --------

def test_access_token_claims():
    provider = JwtProvider(access_minutes=15)
    token, expires_at = provider.issue_access_token(_user())
    claims = provider.decode(token)

    assert claims["sub"] == "7"
    assert claims["role"] == "Agent"
    assert claims["given_name"] == "Ann"
    assert claims["typ"] == "access"
    assert expires_at.tzinfo is None
    assert timedelta(minutes=14) < expires_at - utcnow() <= timedelta(minutes=15)


def test_expired_access_token():
    provider = JwtProvider()
    now = datetime.now(tz=timezone.utc)
    token = jwt.encode(
        {
            "iss": "hickory-api",
            "aud": "hickory-web",
            "sub": "7",
            "iat": int((now - timedelta(hours=2)).timestamp()),
            "exp": int((now - timedelta(hours=1)).timestamp()),
            "jti": "x",
            "typ": "access",
        },
        "test-secret-key-with-enough-length-for-hs256",
        algorithm="HS256",
    )

    with pytest.raises(UnauthorizedError) as exc:
        provider.decode(token)
    assert exc.value.code == "token_expired"


def test_token_signed_with_another_secret_is_rejected():
    other = JwtProvider(secret="another-secret-key-with-enough-length-too")
    token, _ = other.issue_access_token(_user())

    with pytest.raises(UnauthorizedError) as exc:
        JwtProvider().decode(token)
    assert exc.value.code == "invalid_token"


# -------- passwords --------

def test_password_hash_verifies():
    h, salt, algo, iterations = PasswordHasher.hash_password("s3cure-password")

    assert iterations == PasswordHasher.DEFAULT_ITERATIONS
    assert PasswordHasher.verify_password("s3cure-password", password_hash=h, password_salt=salt, iterations=iterations, algo=algo)
    assert not PasswordHasher.verify_password("wrong-password", password_hash=h, password_salt=salt, iterations=iterations, algo=algo)


def test_short_password_rejected():
    with pytest.raises(ValidationError):
        PasswordHasher.hash_password("short")


def test_corrupt_stored_hash_does_not_verify():
    assert not PasswordHasher.verify_password(
        "whatever-password", password_hash="%%%", password_salt="%%%", iterations=1000, algo="pbkdf2_sha256"
    )


# -------- refresh token values --------

def test_refresh_tokens_are_unique_and_previewed():
    tokens = {generate_refresh_token() for _ in range(100)}
    assert len(tokens) == 100

    token = tokens.pop()
    assert len(hash_token(token)) == 64
    preview = token_preview(token)
    assert preview[:8] == token[:8]
    assert set(preview[8:]) == {"*"}
