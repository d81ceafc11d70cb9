"""Database configuration and session management.

This module initializes the SQLAlchemy engine, session factory and
declarative base, and provides the helpers every repository goes through:

* :func:`is_available` reports whether a connection string is configured;
* :func:`execute` runs a statement, retrying reads on connection errors;
* :func:`read` and :func:`write` wrap a unit of repository work with the
  read/write failure policy (reads return :class:`~chefsite.result.Err`,
  writes raise);
* :func:`log_error` logs a failure and flags connection problems.
"""

import time
from typing import Callable, Iterator, TypeVar

from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.exc import DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core import get_settings
from .errors import ConnectivityError, QueryError
from .logs import get_logger
from .result import Err, Ok, Result

T = TypeVar("T")

logger = get_logger(__name__)
settings = get_settings()


def normalize_db_url(url: str) -> str:
    """Rewrite ``postgres://`` URLs into the SQLAlchemy psycopg2 form."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://") and "+psycopg2" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return url


DATABASE_URL = normalize_db_url(settings.database_url) if settings.database_url else None

engine = (
    create_engine(DATABASE_URL, echo=settings.DB_ECHO, pool_pre_ping=True, future=True)
    if DATABASE_URL
    else None
)
"""SQLAlchemy engine bound to the configured database URL, if any."""


SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)
"""Factory for database sessions."""


Base = declarative_base()
"""Declarative base class for SQLAlchemy models."""


def is_available() -> bool:
    """Return ``True`` when a database connection string is configured."""
    return engine is not None


def get_db() -> Iterator[Session | None]:
    """
    Provide a SQLAlchemy database session.

    This function is used as a FastAPI dependency. It yields ``None`` when
    no database is configured so that repositories can report the store as
    unavailable instead of failing at import time.
    """
    if not is_available():
        yield None
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_connection_error(error: BaseException) -> bool:
    """Tell connection failures apart from query failures."""
    if isinstance(error, (OperationalError, DisconnectionError, ConnectivityError)):
        return True
    message = str(error)
    return "connection" in message.lower() or "ECONNREFUSED" in message


def log_error(error: BaseException, operation: str) -> None:
    """
    Log a database failure for ``operation``.

    Connection failures get an extra warning pointing at the connection
    string. Nothing is retried or reconnected here.
    """
    logger.error("database_error", operation=operation, error=str(error))
    if is_connection_error(error):
        logger.warning(
            "database_connection_failed",
            operation=operation,
            hint="check the DATABASE_URL environment variable",
        )


def execute(db: Session, statement, retry: bool = True):
    """
    Execute ``statement`` on ``db``.

    Read statements are retried on connection errors with exponential
    backoff; pass ``retry=False`` for writes.

    Args:
        db (Session): Database session.
        statement: SQLAlchemy executable.
        retry (bool): Retry on connection errors.

    Returns:
        sqlalchemy.engine.Result: Statement result.
    """
    attempts = max(1, settings.DB_RETRY_ATTEMPTS) if retry else 1
    delay = settings.DB_RETRY_BACKOFF
    for attempt in range(1, attempts + 1):
        try:
            return db.execute(statement)
        except OperationalError as exc:
            if attempt == attempts or not is_connection_error(exc):
                raise
            db.rollback()
            logger.warning("database_retry", attempt=attempt, delay=delay)
            time.sleep(delay)
            delay *= 2


def read(db: Session | None, operation: str, fn: Callable[[Session], T]) -> Result[T]:
    """
    Run a read through the availability and error policy.

    Args:
        db (Session | None): Database session, ``None`` when unavailable.
        operation (str): Human readable operation name for logs.
        fn (Callable): Work to run with the session.

    Returns:
        Result: ``Ok`` with the value, or ``Err`` with a
        :class:`ConnectivityError` or :class:`QueryError`.
    """
    if db is None:
        logger.warning("database_unavailable", operation=operation)
        return Err(ConnectivityError("Database connection not available", operation))
    try:
        return Ok(fn(db))
    except SQLAlchemyError as exc:
        db.rollback()
        log_error(exc, operation)
        if is_connection_error(exc):
            return Err(ConnectivityError(str(exc), operation))
        return Err(QueryError(str(exc), operation))
    except ValidationError as exc:
        # stored row does not satisfy the output schema
        logger.error("database_row_invalid", operation=operation, error=str(exc))
        return Err(QueryError(str(exc), operation))


def write(db: Session | None, operation: str, fn: Callable[[Session], T]) -> T:
    """
    Run a write; failures are logged and propagated to the caller.

    Raises:
        ConnectivityError: If no database is configured.
        SQLAlchemyError: Whatever the store reported.
    """
    if db is None:
        logger.warning("database_unavailable", operation=operation)
        raise ConnectivityError("Database connection not available", operation)
    try:
        return fn(db)
    except SQLAlchemyError as exc:
        db.rollback()
        log_error(exc, operation)
        raise
