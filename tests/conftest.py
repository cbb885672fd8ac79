# tests/conftest.py
import os

# settings are read at import time
os.environ.setdefault("DB_URL", "sqlite://")
os.environ["SOCKETIO_ASYNC_MODE"] = "threading"
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["APP_PREFIX"] = ""

import pytest  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

import hickory.infrastructure.database.models  # noqa: F401, E402
from hickory.core.clock import utcnow  # noqa: E402
from hickory.core.enums import TicketPriority, TicketStatus, UserRole  # noqa: E402
from hickory.core.row_version import INITIAL_ROW_VERSION  # noqa: E402
from hickory.infrastructure.database.base_model import BaseModel  # noqa: E402
from hickory.infrastructure.database.models.ticket_model import TicketModel  # noqa: E402
from hickory.infrastructure.database.models.user_model import UserModel  # noqa: E402
from hickory.infrastructure.database.session import configure_engine  # noqa: E402
from hickory.infrastructure.security.jwt_provider import JwtProvider  # noqa: E402
from hickory.infrastructure.security.password_hasher import PasswordHasher  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"

# cheap hash for fixtures; the real iteration count is exercised in test_security
_HASH, _SALT, _ALGO, _ITERATIONS = PasswordHasher.hash_password(TEST_PASSWORD, iterations=1_000)


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def engine(tmp_path):
    # file database so separate sessions see each other's commits
    eng = configure_engine(f"sqlite:///{tmp_path / 'hickory.db'}")
    BaseModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    s = session_factory()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.END_USER, *, is_active: bool = True, first_name: str = "Test") -> UserModel:
        counter["n"] += 1
        with session_factory() as s:
            user = UserModel(
                email=f"user{counter['n']}@example.com",
                first_name=first_name,
                last_name=f"User{counter['n']}",
                role=UserRole(role).value,
                password_algo=_ALGO,
                password_iterations=_ITERATIONS,
                password_hash=_HASH,
                password_salt=_SALT,
                is_active=is_active,
                created_at=utcnow(),
            )
            s.add(user)
            s.commit()
            return user

    return _make


@pytest.fixture
def make_ticket(session_factory):
    counter = {"n": 0}

    def _make(submitter: UserModel, *, status: TicketStatus = TicketStatus.OPEN) -> TicketModel:
        counter["n"] += 1
        now = utcnow()
        with session_factory() as s:
            ticket = TicketModel(
                ticket_number=f"TKT-{counter['n']:05d}",
                title="Printer on fire",
                description="The printer on floor 3 is on fire again.",
                status=TicketStatus(status).value,
                priority=TicketPriority.MEDIUM.value,
                submitter_id=submitter.id,
                created_at=now,
                updated_at=now,
                row_version=INITIAL_ROW_VERSION,
            )
            s.add(ticket)
            s.commit()
            return ticket

    return _make


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def app(engine):
    from hickory.main import create_app

    flask_app = create_app()
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header():
    def _header(user: UserModel) -> dict:
        token, _ = JwtProvider().issue_access_token(user)
        return {"Authorization": f"Bearer {token}"}

    return _header


@pytest.fixture
def user_password() -> str:
    return TEST_PASSWORD
