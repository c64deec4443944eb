"""Database session management."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from warden.core.config import settings

_AFTER_COMMIT = "after_commit_callbacks"


def _connect_args(url: str) -> dict:
    if url.startswith("postgresql"):
        # Bound every statement; this is the only cancellation we rely on.
        return {"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"}
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.debug,
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI to get DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def on_commit(db: Session, callback: Callable[[], None]) -> None:
    """Run callback only after the enclosing atomic() block commits."""
    db.info.setdefault(_AFTER_COMMIT, []).append(callback)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Commit everything done in the block once, or roll it all back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        db.info.pop(_AFTER_COMMIT, None)
        raise
    for callback in db.info.pop(_AFTER_COMMIT, []):
        callback()
