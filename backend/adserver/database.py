import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .config import settings
from .errors import RetryableError, FatalError

logger = logging.getLogger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with foreign keys off; cascades and SET NULL depend on them
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str):
    """Create an engine with a bounded wait on every storage call"""
    timeout = settings.DB_TIMEOUT_SECONDS

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False, "timeout": timeout}}
        if url in IN_MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, **kwargs)
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    # PostgreSQL
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=timeout,
        connect_args={"options": f"-c statement_timeout={timeout * 1000}"}
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Dependency for database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Commit on success, roll back on any failure.

    Timeouts and lock contention come back as RetryableError; everything else
    (IntegrityError included) is re-raised untouched for the caller to map.
    """
    try:
        yield db
        db.commit()
    except (OperationalError, PoolTimeoutError) as e:
        db.rollback()
        logger.warning(f"Storage call failed, transaction rolled back: {e}")
        raise RetryableError("Storage is busy or unavailable, retry later") from e
    except Exception:
        db.rollback()
        raise


@contextmanager
def guard_storage(db: Session):
    """Translate storage timeouts raised by read-only queries"""
    try:
        yield db
    except (OperationalError, PoolTimeoutError) as e:
        db.rollback()
        logger.warning(f"Storage read failed: {e}")
        raise RetryableError("Storage is busy or unavailable, retry later") from e


def init_db(bind=None):
    """Create all tables. Raises FatalError when storage cannot be reached."""
    from . import models  # noqa: F401  (registers the tables on Base)

    try:
        Base.metadata.create_all(bind=bind or engine)
    except SQLAlchemyError as e:
        logger.critical(f"Database initialization failed: {e}")
        raise FatalError(f"Cannot initialize storage: {e}") from e
