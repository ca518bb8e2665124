# localcooks/database.py
"""
Engine, session factory and declarative base.

SQLite URLs (local development, tests) get a thread-tolerant connection so
routes can hand the session to ``asyncio.to_thread``; anything else gets a
pre-pinged connection pool.
"""

import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .core.config import settings

logger = logging.getLogger(__name__)


def _build_engine(url: str) -> Engine:
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        return create_engine(
            url, echo=settings.database_echo, connect_args={"check_same_thread": False}
        )
    logger.info(f"Using {backend} database with a pooled engine")
    return create_engine(
        url,
        pool_size=10,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=3600,
        pool_pre_ping=True,
        echo=settings.database_echo,
    )


engine: Engine = _build_engine(settings.get_database_url())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield a session; commit on success, roll back on any error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create all tables (local development and tests)."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
