"""
Database session management with connection pooling.

Provides a shared FastAPI dependency for database sessions across all routes.
Uses SQLAlchemy with connection pooling for production workloads.

Usage:
    from orgsync.database.session import get_db_session

    @router.get("/items")
    def get_items(db: Session = Depends(get_db_session)):
        return db.query(Item).all()
"""

import logging
from contextlib import contextmanager
from typing import Callable, ContextManager, Generator, Iterator, Optional

from fastapi import HTTPException, status
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from orgsync.config.settings import normalize_database_url

logger = logging.getLogger(__name__)

# Module-level engine singleton
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def configure_engine(database_url: Optional[str]) -> Engine:
    """
    Create the database engine singleton for the given URL.

    Uses connection pooling with sensible defaults for production:
    - pool_size: 5 connections
    - max_overflow: 10 additional connections under load
    - pool_pre_ping: Verify connections before use

    Raises:
        ValueError: If no database URL is given
    """
    global _engine, _SessionLocal

    database_url = normalize_database_url(database_url)
    if not database_url:
        raise ValueError("DATABASE_URL is not set")

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(
            database_url,
            poolclass=QueuePool,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,  # Verify connection health
            pool_recycle=1800,   # Recycle connections after 30 minutes
        )

    if _engine is not None:
        _engine.dispose()

    _engine = engine
    _SessionLocal = sessionmaker(autoflush=False, bind=engine)
    logger.info("Database engine created", extra={"dialect": engine.dialect.name})
    return engine


def get_engine() -> Engine:
    """
    Get the configured engine.

    Raises:
        ValueError: If configure_engine has not been called
    """
    if _engine is None:
        raise ValueError("Database engine is not configured")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get the session factory singleton."""
    if _SessionLocal is None:
        raise ValueError("Database engine is not configured")
    return _SessionLocal


def dispose_engine() -> None:
    """Close all pooled connections and forget the engine."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _SessionLocal = None


def _open_session() -> Session:
    try:
        SessionLocal = get_session_factory()
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database not configured"
        )
    return SessionLocal()


def get_db_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    Creates a new session for each request and ensures proper cleanup.
    Raises HTTP 503 if database is not configured.
    """
    session = _open_session()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Open a session inside a route body rather than as a dependency.

    Raises HTTP 503 on entry if database is not configured.
    """
    session = _open_session()
    try:
        yield session
    finally:
        session.close()


def get_session_opener() -> Callable[[], ContextManager[Session]]:
    """
    FastAPI dependency returning a lazy session opener.

    Nothing is opened while dependencies resolve, so routes can reject a
    request before touching the database.

    Usage:
        @router.post("/hook")
        async def hook(open_session=Depends(get_session_opener)):
            with open_session() as session:
                ...
    """
    return session_scope
