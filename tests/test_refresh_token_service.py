# tests/test_refresh_token_service.py
from datetime import timedelta

import pytest

from hickory.core.clock import utcnow
from hickory.core.enums import UserRole
from hickory.core.exceptions import (
    AccountInactiveError,
    InvalidTokenError,
    TokenExpiredError,
    TokenReuseDetectedError,
)
from hickory.infrastructure.database.models.refresh_token_model import RefreshTokenModel
from hickory.infrastructure.database.session import db_session
from hickory.infrastructure.security.refresh_token_generator import hash_token
from hickory.repositories.refresh_token_repository import RefreshTokenRepository
from hickory.repositories.user_repository import UserRepository
from hickory.services.refresh_token_service import (
    REASON_LOGOUT,
    REASON_REUSE,
    REASON_ROTATED,
    RefreshTokenService,
)


def _service(session, **kwargs) -> RefreshTokenService:
    return RefreshTokenService(
        repo=RefreshTokenRepository(session),
        user_repo=UserRepository(session),
        **kwargs,
    )


def _row(session_factory, token: str) -> RefreshTokenModel:
    with session_factory() as s:
        return RefreshTokenRepository(s).get_by_hash(hash_token(token))


@pytest.fixture
def user(make_user):
    return make_user(UserRole.END_USER)


@pytest.fixture
def issue(session_factory, user):
    def _issue(**kwargs) -> str:
        with session_factory() as s:
            token = _service(s).issue(user_id=user.id, **kwargs)
            s.commit()
            return token

    return _issue


def test_issued_token_is_stored_only_as_hash(session_factory, issue):
    token = issue()
    row = _row(session_factory, token)

    assert row is not None
    assert row.token_hash == hash_token(token)
    assert row.token_hash != token
    assert len(token) >= 43  # 32 random bytes, urlsafe base64
    assert row.is_active
    assert row.expires_at - row.created_at == timedelta(days=30)


def test_rotation_revokes_old_and_links_new(session_factory, issue, user):
    r1 = issue()

    with session_factory() as s:
        owner, r2 = _service(s).rotate(refresh_token=r1)
        s.commit()

    assert owner.id == user.id
    assert r2 != r1

    old = _row(session_factory, r1)
    new = _row(session_factory, r2)
    assert old.is_revoked
    assert old.revoked_reason == REASON_ROTATED
    assert old.replaced_by_token_hash == new.token_hash
    assert new.is_active


def test_second_use_of_rotated_token_revokes_the_family(session_factory, issue):
    r1 = issue()
    other_device = issue()

    with session_factory() as s:
        _, r2 = _service(s).rotate(refresh_token=r1)
        s.commit()

    # replayed copy of r1; db_session keeps the revocation although the call fails
    with pytest.raises(TokenReuseDetectedError):
        with db_session() as s:
            _service(s).rotate(refresh_token=r1)

    for token in (r2, other_device):
        row = _row(session_factory, token)
        assert row.is_revoked
        assert row.revoked_reason == REASON_REUSE

    # the legitimate client is logged out too
    with pytest.raises(TokenReuseDetectedError):
        with db_session() as s:
            _service(s).rotate(refresh_token=r2)


def test_reuse_revocation_is_lost_without_commit(session_factory, issue):
    # the commit is what makes the family revocation stick
    r1 = issue()
    with session_factory() as s:
        _, r2 = _service(s).rotate(refresh_token=r1)
        s.commit()

    with session_factory() as s:
        with pytest.raises(TokenReuseDetectedError):
            _service(s).rotate(refresh_token=r1)
        s.rollback()

    assert _row(session_factory, r2).is_active


def test_unknown_token_is_invalid(session):
    with pytest.raises(InvalidTokenError):
        _service(session).rotate(refresh_token="not-a-real-token")


def test_expired_token(session_factory, user):
    with session_factory() as s:
        past = utcnow() - timedelta(days=31)
        s.add(
            RefreshTokenModel(
                user_id=user.id,
                token_hash=hash_token("expired-token"),
                created_at=past,
                expires_at=past + timedelta(days=30),
            )
        )
        s.commit()

    with session_factory() as s:
        with pytest.raises(TokenExpiredError):
            _service(s).rotate(refresh_token="expired-token")

    # expiry alone is not a reuse signal
    assert not _row(session_factory, "expired-token").is_revoked


def test_inactive_account(session_factory, make_user):
    sleeper = make_user(UserRole.END_USER, is_active=False)
    with session_factory() as s:
        token = _service(s).issue(user_id=sleeper.id)
        s.commit()

    with session_factory() as s:
        with pytest.raises(AccountInactiveError):
            _service(s).rotate(refresh_token=token)


def test_login_session_limit_revokes_oldest(session_factory, issue, user):
    tokens = [issue(enforce_session_limit=True) for _ in range(5)]
    sixth = issue(enforce_session_limit=True)

    oldest = _row(session_factory, tokens[0])
    assert oldest.is_revoked
    assert oldest.revoked_reason == "Exceeded maximum active sessions (5)"
    assert all(_row(session_factory, t).is_active for t in tokens[1:] + [sixth])


def test_revoke_all_on_logout(session_factory, issue, user):
    tokens = [issue(), issue()]

    with session_factory() as s:
        count = _service(s).revoke_all(user_id=user.id)
        s.commit()

    assert count == 2
    for token in tokens:
        row = _row(session_factory, token)
        assert row.is_revoked
        assert row.revoked_reason == REASON_LOGOUT


def test_losing_a_concurrent_rotation_counts_as_reuse(session_factory, issue):
    r1 = issue()

    slow = session_factory()
    try:
        # slow has loaded r1 as active before the other request rotates it
        stale_row = RefreshTokenRepository(slow).get_by_hash(hash_token(r1))
        assert stale_row.is_active

        with session_factory() as fast:
            _, r2 = _service(fast).rotate(refresh_token=r1)
            fast.commit()

        with pytest.raises(TokenReuseDetectedError):
            _service(slow).rotate(refresh_token=r1)
        slow.commit()
    finally:
        slow.close()

    assert _row(session_factory, r2).revoked_reason == REASON_REUSE
