"""
Database Session Management

Provides database connection pooling and session management.
"""
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, Optional

from sqlalchemy import create_engine, event, exc, pool, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from src.sheriffsale.utils.logger import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[], Session]


def build_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create an engine for the configured database.

    Pool sizing only applies to server databases; SQLite URLs get the
    default pool.
    """
    url = database_url or settings.database_url
    options: Dict[str, Any] = {"echo": settings.database_echo}

    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=settings.database_pool_recycle,
            pool_pre_ping=True,  # Verify connections before using
        )

    return create_engine(url, **options)


engine = build_engine()


@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    logger.debug("database_connection_established")


@event.listens_for(pool.Pool, "invalidate")
def receive_invalidate(dbapi_conn, connection_record, exception):
    """
    Event listener for connection invalidation.

    Logs when a connection is marked as invalid and removed from pool.
    """
    logger.warning(
        "database_connection_invalidated",
        exception=str(exception) if exception else None
    )


SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)


@contextmanager
def session_scope(session_factory: SessionFactory) -> Generator[Session, None, None]:
    """
    Open a session from the given factory with automatic cleanup.

    Commits on success, rolls back and re-raises on error, always closes.

    Usage:
        with session_scope(SessionLocal) as session:
            repository.upsert(session, key, fields)

    Yields:
        Database session
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except exc.SQLAlchemyError as e:
        session.rollback()
        logger.error(
            "database_session_rollback",
            error=str(e),
            error_type=type(e).__name__
        )
        raise
    except Exception as e:
        session.rollback()
        logger.error(
            "database_session_error",
            error=str(e),
            error_type=type(e).__name__
        )
        raise
    finally:
        session.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Get a session on the application database.

    Usage:
        with get_db_session() as session:
            result = session.query(ListingRecord).all()
    """
    with session_scope(SessionLocal) as session:
        yield session


def health_check() -> bool:
    """
    Check database connection health.

    Returns:
        True if database is accessible, False otherwise
    """
    try:
        with get_db_session() as session:
            session.execute(text("SELECT 1"))
            logger.info("database_health_check_success")
            return True
    except exc.SQLAlchemyError as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        return False


def create_all_tables(bind: Optional[Engine] = None):
    """
    Create all database tables defined in models.

    Args:
        bind: Engine to create the tables on (application engine if None)
    """
    from src.sheriffsale.db.base import Base, import_all_models

    logger.info("creating_database_tables")
    import_all_models()
    Base.metadata.create_all(bind=bind or engine)
    logger.info("database_tables_created")
