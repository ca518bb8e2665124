# localcooks/models/application.py
"""Chef application model."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class ApplicationStatus:
    IN_REVIEW = "inReview"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    ALL = (IN_REVIEW, APPROVED, REJECTED, CANCELLED)


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    food_safety_license = Column(String(16), nullable=False)
    food_establishment_cert = Column(String(16), nullable=False)
    kitchen_preference = Column(String(16), nullable=False)
    feedback = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default=ApplicationStatus.IN_REVIEW)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="applications")

    def __repr__(self) -> str:
        return f"<Application {self.id} user={self.user_id} status={self.status}>"
