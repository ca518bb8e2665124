# localcooks/api/dependencies/database.py
"""Request-scoped database session dependency (overridden in tests)."""

from typing import Generator

from sqlalchemy.orm import Session

from ... import database


def get_db() -> Generator[Session, None, None]:
    yield from database.get_db()
