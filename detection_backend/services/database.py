"""Database engine and session management"""
from contextlib import contextmanager
from functools import lru_cache
from typing import Generator, Optional

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from detection_backend.settings import settings


def build_engine(url: Optional[str] = None) -> Engine:
    """Create an engine for the given URL (settings.DATABASE_URL by default)"""
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            # a single shared connection keeps the in-memory database alive
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.SQL_ECHO, future=True, **kwargs)
    return create_engine(
        url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.SQL_ECHO,
        future=True,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return build_engine()


def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@contextmanager
def write_session(factory: sessionmaker) -> Generator[Session, None, None]:
    """Write session context manager"""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def read_session(factory: sessionmaker) -> Generator[Session, None, None]:
    """Read session context manager"""
    session = factory()
    try:
        yield session
    finally:
        session.close()


def test_connection(engine: Optional[Engine] = None) -> bool:
    """Database connection check"""
    engine = engine or get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
