"""Repositories for locations and the storage inventory hanging off them."""

from typing import List

from sqlalchemy.orm import Session

from ..models.location import Location
from .base_repository import BaseRepository


class LocationRepository(BaseRepository[Location]):
    def __init__(self, db: Session):
        super().__init__(db, Location)

    def list_all(self) -> List[Location]:
        return self._execute_query(self._build_query().order_by(Location.name.asc()))

    def list_for_manager(self, manager_id: str) -> List[Location]:
        query = (
            self._build_query()
            .filter(Location.manager_id == manager_id)
            .order_by(Location.created_at.asc(), Location.id.asc())
        )
        return self._execute_query(query)

    def count_for_manager(self, manager_id: str) -> int:
        return self.count(manager_id=manager_id)

    def location_ids_for_manager(self, manager_id: str) -> List[str]:
        rows = self.db.query(Location.id).filter(Location.manager_id == manager_id).all()
        return [row[0] for row in rows]
