"""
Database engine, session factory and store-boundary helpers.

Every store wraps its database work in ``store_operation`` so that a slow or
broken backend surfaces as ``InternalError`` instead of hanging the request.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from shortlink_app.config import settings
from shortlink_app.errors import InternalError

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


def build_engine(database_url: str, timeout_seconds: Optional[float] = None) -> Engine:
    """
    Create an engine whose every connection/statement is time-bounded.

    SQLite: busy timeout (lock waits), WAL journal, foreign keys on.
    Others: pool checkout timeout, plus statement_timeout on PostgreSQL.
    """
    timeout = timeout_seconds if timeout_seconds is not None else settings.store_timeout_seconds

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout},
            pool_pre_ping=True,
        )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

        return engine

    connect_args = {}
    if database_url.startswith("postgresql"):
        connect_args["options"] = f"-c statement_timeout={int(timeout * 1000)}"

    return create_engine(
        database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_timeout=timeout,
    )


engine = build_engine(settings.database_url)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """Request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> sessionmaker:
    """
    Session factory for work that outlives the request
    (background click recording).
    """
    return SessionLocal


@contextmanager
def store_operation(db: Session, action: str):
    """
    Run a unit of store work, translating storage failures to InternalError.

    IntegrityError is re-raised untouched (after rollback) so callers can turn
    unique-constraint violations into ConflictError.
    """
    try:
        yield
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Storage failure during %s: %s", action, e, exc_info=True)
        raise InternalError(f"Storage unavailable while trying to {action}") from e
