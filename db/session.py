"""Database session management for the reservation store."""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.settings import Settings


def create_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create SQLAlchemy engine.

    Args:
        url: Database URL (settings value if omitted)
        echo: Whether to log all SQL statements

    Returns:
        SQLAlchemy engine
    """
    url = url or Settings().database_url
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}

    return sa_create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory with the settings the service layer expects."""
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Transactional scope around a series of operations.

    Example:
        with session_scope(factory) as session:
            # use session
            pass
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Initialize database by creating all tables."""
    from .base import Base
    from . import models_sqlalchemy  # noqa: F401  registers tables

    Base.metadata.create_all(bind=engine)


def drop_db(engine: Engine) -> None:
    """Drop all database tables. Use with caution!"""
    from .base import Base

    Base.metadata.drop_all(bind=engine)
