"""
database.py — Database Session & Connection Management

Purpose:
- Create and provide access to the relational store holding company records.
- Manage SQLAlchemy Engine + Session lifecycle.
- Expose a FastAPI dependency `get_db()` that yields a session per-request.
- Create the schema on startup (`init_db()`); there are no migrations.

Key Characteristics:
- Synchronous SQLAlchemy engine.
- Session is opened at the start of a request and closed after the response.
- Each service operation commits its own unit of work.

This module does NOT:
- Define ORM models (see app/models/*).
- Perform any queries or business logic.
"""

from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# SQLAlchemy Engine
# -----------------------------------------------------------------------------

def normalize_database_url(url: str) -> str:
    """
    Pick the psycopg (v3) driver for bare postgres URLs.
    Other URLs are returned unchanged.
    """
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://") and "+" not in url.split("://")[0]:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(url: str) -> Engine:
    url = normalize_database_url(url)
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are used from FastAPI's worker threads
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


db_url = settings.DATABASE_URL

if not db_url:
    # Endpoints that need DB will raise an error when get_db() is called
    engine: Optional[Engine] = None
    SessionLocal = None
else:
    engine = build_engine(db_url)

    # Session factory
    SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


def init_db(bind: Optional[Engine] = None) -> None:
    """
    Create all tables (safe to call multiple times).
    """
    from app.models.company import Base

    target = bind or engine
    if target is None:
        logger.warning("DATABASE_URL is empty; skipping schema creation")
        return
    Base.metadata.create_all(bind=target)

# -----------------------------------------------------------------------------
# FastAPI Dependency
# -----------------------------------------------------------------------------

def get_db() -> Iterator[Session]:
    """
    FastAPI dependency: yields a database session for the duration of the request.

    Usage in API endpoint:
        def endpoint(db: Session = Depends(get_db)):
            ...

    Raises:
        RuntimeError: If database is not configured (DATABASE_URL is empty)
    """
    if SessionLocal is None:
        raise RuntimeError(
            "Database is not configured. Please set the DATABASE_URL environment variable."
        )

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
