# localcooks/models/microlearning.py
"""Food-safety training progress and completion models."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func
import ulid

from ..database import Base


class VideoProgress(Base):
    __tablename__ = "video_progress"
    __table_args__ = (UniqueConstraint("user_id", "video_id", name="uq_video_progress_user_video"),)

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    video_id = Column(String(64), nullable=False)
    progress = Column(Float, nullable=False, default=0.0)
    watched_percentage = Column(Float, nullable=False, default=0.0)
    completed = Column(Boolean, nullable=False, default=False)
    is_rewatching = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<VideoProgress {self.user_id}:{self.video_id} {self.watched_percentage:.0f}%>"


class MicrolearningCompletion(Base):
    __tablename__ = "microlearning_completions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, unique=True)
    completed_at = Column(DateTime(timezone=True), nullable=False)
    confirmed = Column(Boolean, nullable=False, default=False)
    certificate_generated = Column(Boolean, nullable=False, default=False)
    video_progress = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
