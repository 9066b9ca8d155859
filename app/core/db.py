"""Database engine, session factory and dialect helpers."""

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

# pool_pre_ping=True to avoid broken connections between daily runs
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, future=True)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


def get_session() -> Iterator[Session]:
    """Yield a session and always close it afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db: Session):
    """Return the ``insert`` construct supporting ON CONFLICT for the bound dialect.

    Postgres in production, SQLite for local runs and tests.
    """
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert
