"""
Database connection and session management for the snapshot store.
"""

from contextlib import contextmanager
from typing import Callable, Generator, Optional

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger(__name__)

# Global singletons
_engine: Optional[Engine] = None
_SessionFactory: Optional[scoped_session] = None


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across threads (the API serves requests
    from a thread pool). An in-memory SQLite database lives on a single
    static connection, otherwise every session would see an empty database.
    """
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,  # Verify connections before using
        **kwargs,
    )


def get_engine() -> Engine:
    """
    Get or create SQLAlchemy engine (singleton).

    Returns:
        SQLAlchemy Engine instance
    """
    global _engine

    if _engine is None:
        from seraph.config import settings

        _engine = build_engine(settings.database_url, echo=settings.database_echo_sql)

        logger.info("snapshot_db_engine_created", database=_engine.url.database)

    return _engine


def get_session_factory() -> scoped_session:
    """
    Get or create scoped session factory (singleton).

    Returns:
        Scoped session factory
    """
    global _SessionFactory

    if _SessionFactory is None:
        engine = get_engine()
        _SessionFactory = scoped_session(sessionmaker(bind=engine, expire_on_commit=False))
        logger.info("snapshot_db_session_factory_created")

    return _SessionFactory


@contextmanager
def get_db_session(
    session_factory: Optional[Callable[[], Session]] = None,
) -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic commit/rollback.

    Usage:
        >>> with get_db_session() as session:
        ...     session.add(ProfileAnalysis(...))
        ...     # Automatically commits on success, rolls back on exception

    Args:
        session_factory: Session factory to use (default: global scoped factory)

    Yields:
        SQLAlchemy Session instance

    Raises:
        Exception: Any database exception (after rollback)
    """
    factory = session_factory or get_session_factory()
    session = factory()

    try:
        yield session
        session.commit()
        logger.debug("snapshot_db_session_committed")
    except Exception as e:
        session.rollback()
        logger.error("snapshot_db_session_rollback", error=str(e), error_type=type(e).__name__)
        raise
    finally:
        session.close()


def create_all_tables(engine: Optional[Engine] = None) -> None:
    """
    Create all snapshot tables if they do not exist.
    """
    from .models import Base

    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("snapshot_db_tables_created")


def drop_all_tables(engine: Optional[Engine] = None) -> None:
    """
    Drop all snapshot tables.

    WARNING: Destructive operation. Only use for testing.
    """
    from .models import Base

    engine = engine or get_engine()
    Base.metadata.drop_all(engine)
    logger.warning("snapshot_db_tables_dropped")
