# tests/test_auth_routes.py
from sqlalchemy import select

from hickory.core.enums import UserRole
from hickory.infrastructure.database.models.audit_log_model import AuditLogModel
from hickory.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from hickory.infrastructure.security.refresh_token_generator import hash_token
from hickory.services.refresh_token_service import REASON_REUSE, REASON_ROTATED


def _login(client, user, password):
    return client.post("/api/auth/login", json={"email": user.email, "password": password})


def _token_row(session_factory, token):
    with session_factory() as s:
        return s.execute(
            select(RefreshTokenModel).where(RefreshTokenModel.token_hash == hash_token(token))
        ).scalar_one()


def test_register_returns_token_pair(client):
    res = client.post(
        "/api/auth/register",
        json={"email": "New.Person@Example.com", "password": "long-enough-pw", "firstName": "New", "lastName": "Person"},
    )

    assert res.status_code == 201
    body = res.get_json()
    assert body["email"] == "new.person@example.com"
    assert body["role"] == UserRole.END_USER.value
    assert body["firstName"] == "New"
    assert body["accessToken"] and body["refreshToken"]
    assert body["expiresAt"].endswith("+00:00")


def test_register_duplicate_email_is_conflict(client, make_user):
    existing = make_user()
    res = client.post(
        "/api/auth/register",
        json={"email": existing.email, "password": "long-enough-pw", "firstName": "A", "lastName": "B"},
    )
    assert res.status_code == 409
    assert res.get_json()["code"] == "conflict"


def test_register_validates_payload(client):
    res = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})
    assert res.status_code == 400
    assert res.get_json()["code"] == "validation_error"


def test_failed_login_is_audited(client, make_user, session_factory):
    user = make_user()
    res = _login(client, user, "wrong-password")

    assert res.status_code == 401
    assert res.get_json()["code"] == "invalid_credentials"

    with session_factory() as s:
        actions = s.execute(select(AuditLogModel.action_name)).scalars().all()
    assert "LOGIN_FAILED" in actions


def test_refresh_rotates(client, make_user, user_password, session_factory):
    user = make_user()
    r1 = _login(client, user, user_password).get_json()["refreshToken"]

    res = client.post("/api/auth/refresh", json={"refreshToken": r1})

    assert res.status_code == 200
    body = res.get_json()
    assert body["userId"] == user.id
    assert body["refreshToken"] != r1
    assert _token_row(session_factory, r1).revoked_reason == REASON_ROTATED


def test_replayed_refresh_token_kills_the_session(client, make_user, user_password, session_factory):
    user = make_user()
    r1 = _login(client, user, user_password).get_json()["refreshToken"]
    r2 = client.post("/api/auth/refresh", json={"refreshToken": r1}).get_json()["refreshToken"]

    replay = client.post("/api/auth/refresh", json={"refreshToken": r1})

    assert replay.status_code == 401
    assert replay.get_json() == {"error": "Session expired. Please log in again.", "code": "session_expired"}

    # survived the failed request
    assert _token_row(session_factory, r2).revoked_reason == REASON_REUSE

    again = client.post("/api/auth/refresh", json={"refreshToken": r2})
    assert again.status_code == 401
    assert again.get_json()["code"] == "session_expired"


def test_unknown_refresh_token_gets_the_same_generic_answer(client):
    res = client.post("/api/auth/refresh", json={"refreshToken": "nope"})
    assert res.status_code == 401
    assert res.get_json()["code"] == "session_expired"


def test_logout_revokes_refresh_tokens(client, make_user, user_password, auth_header):
    user = make_user()
    r1 = _login(client, user, user_password).get_json()["refreshToken"]

    res = client.post("/api/auth/logout", headers=auth_header(user))
    assert res.status_code == 204

    assert client.post("/api/auth/refresh", json={"refreshToken": r1}).status_code == 401


def test_logout_requires_token(client):
    res = client.post("/api/auth/logout")
    assert res.status_code == 401
    assert res.get_json()["code"] == "unauthorized"

