# localcooks/repositories/base_repository.py
"""
Base repository for the LocalCooks platform.

Repositories own data access only. They flush but never commit; services
decide transaction boundaries. SQLAlchemy failures are logged and re-raised
as ``RepositoryException``.
"""

from contextlib import contextmanager
import logging
from typing import Any, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Common data access for a single model keyed by a ULID string ``id``.

    Attributes:
        db: SQLAlchemy session (managed by service layer)
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.logger.error(f"Integrity error while trying to {action}: {exc}")
            raise RepositoryException(
                f"Integrity constraint violated ({self.model.__name__}): {exc.orig}"
            ) from exc
        except SQLAlchemyError as exc:
            self.logger.error(f"Database error while trying to {action}: {exc}")
            raise RepositoryException(f"Failed to {action}: {exc}") from exc

    def get_by_id(self, id: str, load_relationships: bool = True) -> Optional[T]:
        with self._guard(f"load {self.model.__name__} {id}"):
            query = self._build_query().filter(self.model.id == id)
            if load_relationships:
                query = self._apply_eager_loading(query)
            return query.first()

    def create(self, **kwargs: Any) -> T:
        """Add and flush a new row so its id is available; does NOT commit."""
        with self._guard(f"create {self.model.__name__}"):
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()
            return entity

    def delete(self, id: str) -> bool:
        """Delete by primary key; False when the row does not exist."""
        with self._guard(f"delete {self.model.__name__} {id}"):
            entity = self.get_by_id(id, load_relationships=False)
            if entity is None:
                return False
            self.db.delete(entity)
            self.db.flush()
            return True

    def count(self, **filters: Any) -> int:
        with self._guard(f"count {self.model.__name__}"):
            return self._build_query().filter_by(**filters).count()

    def find_one_by(self, **filters: Any) -> Optional[T]:
        with self._guard(f"find {self.model.__name__}"):
            return self._build_query().filter_by(**filters).first()

    # Helpers for subclasses

    def _apply_eager_loading(self, query: Query) -> Query:
        """Override in subclasses to add joinedload/selectinload."""
        return query

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        with self._guard(f"query {self.model.__name__}"):
            return query.all()
