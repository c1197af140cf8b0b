"""Database connection and session management."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from gradebook.core.config import settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


def _engine_options() -> dict[str, Any]:
    # SQLite sessions are handed between the threadpool and the event loop
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_size": 10, "max_overflow": 20}


engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    **_engine_options(),
)

SessionLocal = sessionmaker(
    bind=engine,
    class_=Session,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


def get_db() -> Generator[Session, None, None]:
    """Get database session dependency."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
