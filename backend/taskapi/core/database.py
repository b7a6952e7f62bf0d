"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the database backing users, tasks and tokens.
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.
- Own the declarative `Base` shared by every ORM model.

Key Characteristics:
- Synchronous SQLAlchemy engine; route handlers run on the threadpool.
- No Alembic migrations — `init_db()` creates missing tables at startup.
- Session is opened at the start of a request and closed after the response.

This module does NOT:
- Define ORM models (see taskapi/models/*).
- Perform any queries or business logic.
"""

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from taskapi.core.config import settings
from taskapi.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------

def _normalize_url(db_url: str) -> str:
    # Use psycopg (v3) driver for bare postgresql:// URLs
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        return db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_url


def build_engine(db_url: str, **kwargs):
    """
    Create an engine for `db_url`.

    SQLite connections are shared with the worker threads FastAPI runs
    sync endpoints on, so `check_same_thread` is turned off for them.
    """
    db_url = _normalize_url(db_url)
    if db_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        kwargs["connect_args"] = connect_args
    return create_engine(db_url, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    # Import models so their tables are registered on Base.metadata
    from taskapi.models import task, user  # noqa: F401

    target = bind if bind is not None else engine
    Base.metadata.create_all(bind=target)
    logger.info("Database schema ready")


# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            db.execute(...)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
