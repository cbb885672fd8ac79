# hickory/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from hickory.config.settings import settings
from hickory.core.exceptions import AppError

_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def build_engine(url: str) -> Engine:
    kwargs: dict = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)


def configure_engine(url: str) -> Engine:
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = build_engine(url)
    _SessionLocal = sessionmaker(
        bind=_engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    return _engine


@contextmanager
def db_session() -> Iterator[Session]:
    if _SessionLocal is None:
        configure_engine(settings.database_url)

    session: Session = _SessionLocal()
    try:
        yield session
        session.commit()
    except AppError as err:
        # e.g. reuse detection: the revocation must be kept even though the request fails
        if err.commit_session:
            session.commit()
        else:
            session.rollback()
        raise
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
