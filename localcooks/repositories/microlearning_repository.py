"""Repositories for microlearning video progress and completion records."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.microlearning import MicrolearningCompletion, VideoProgress
from .base_repository import BaseRepository


class VideoProgressRepository(BaseRepository[VideoProgress]):
    def __init__(self, db: Session):
        super().__init__(db, VideoProgress)

    def list_for_user(self, user_id: str) -> List[VideoProgress]:
        query = (
            self._build_query()
            .filter(VideoProgress.user_id == user_id)
            .order_by(VideoProgress.video_id.asc())
        )
        return self._execute_query(query)

    def get_for_video(self, user_id: str, video_id: str) -> Optional[VideoProgress]:
        return self.find_one_by(user_id=user_id, video_id=video_id)

    def completed_video_ids(self, user_id: str) -> set[str]:
        rows = (
            self.db.query(VideoProgress.video_id)
            .filter(VideoProgress.user_id == user_id, VideoProgress.completed.is_(True))
            .all()
        )
        return {row[0] for row in rows}


class MicrolearningCompletionRepository(BaseRepository[MicrolearningCompletion]):
    def __init__(self, db: Session):
        super().__init__(db, MicrolearningCompletion)

    def get_for_user(self, user_id: str) -> Optional[MicrolearningCompletion]:
        return self.find_one_by(user_id=user_id)
