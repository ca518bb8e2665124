"""Repository for chef applications."""

from typing import List

from sqlalchemy.orm import Session

from ..models.application import Application, ApplicationStatus
from .base_repository import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    def __init__(self, db: Session):
        super().__init__(db, Application)

    def list_all(self) -> List[Application]:
        return self._execute_query(self._build_query().order_by(Application.created_at.desc()))

    def list_for_user(self, user_id: str) -> List[Application]:
        query = (
            self._build_query()
            .filter(Application.user_id == user_id)
            .order_by(Application.created_at.desc())
        )
        return self._execute_query(query)

    def has_approved(self, user_id: str) -> bool:
        return (
            self._build_query()
            .filter(
                Application.user_id == user_id,
                Application.status == ApplicationStatus.APPROVED,
            )
            .first()
            is not None
        )
