# localcooks/models/user.py
"""
User model for the LocalCooks platform.

A single ``users`` table backs chefs, delivery partners, location managers
and admins. Authentication is delegated to Firebase; the local row is keyed
by ``firebase_uid`` and carries the role flags and Stripe Connect state.

Classes:
    User: Main user model for role management and payout onboarding
"""

from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import ROLE_ADMIN, ROLE_CHEF, ROLE_DELIVERY_PARTNER, ROLE_MANAGER
from ..database import Base


class User(Base):
    """
    Local mirror of a Firebase account.

    Attributes:
        id: Primary key (ULID)
        username: Login email, unique
        role: Primary role; null until the user picks one
        firebase_uid: Firebase Authentication UID
        is_chef / is_delivery_partner / is_manager: Inclusive role toggles
        stripe_connect_account_id: Connected Express account, when created
        stripe_connect_onboarding_status: not_started, in_progress or complete
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    username = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=True)
    role = Column(String(32), nullable=True)
    firebase_uid = Column(String(128), unique=True, index=True, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    has_seen_welcome = Column(Boolean, nullable=False, default=False)

    is_chef = Column(Boolean, nullable=False, default=False)
    is_delivery_partner = Column(Boolean, nullable=False, default=False)
    is_manager = Column(Boolean, nullable=False, default=False)
    is_portal_user = Column(Boolean, nullable=False, default=False)

    stripe_connect_account_id = Column(String(255), unique=True, nullable=True)
    stripe_connect_onboarding_status = Column(String(32), nullable=False, default="not_started")

    manager_onboarding_completed = Column(Boolean, nullable=False, default=False)
    manager_onboarding_skipped = Column(Boolean, nullable=False, default=False)
    manager_onboarding_steps_completed = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    locations = relationship("Location", back_populates="manager", foreign_keys="Location.manager_id")
    applications = relationship("Application", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def has_role(self, role: str) -> bool:
        """Admins pass every role check; otherwise match the role or its flag."""
        if self.is_admin:
            return True
        if role == ROLE_MANAGER:
            return self.role == ROLE_MANAGER or bool(self.is_manager)
        if role == ROLE_CHEF:
            return self.role == ROLE_CHEF or bool(self.is_chef)
        if role == ROLE_DELIVERY_PARTNER:
            return self.role == ROLE_DELIVERY_PARTNER or bool(self.is_delivery_partner)
        return self.role == role

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "firebase_uid": self.firebase_uid,
            "is_chef": bool(self.is_chef),
            "is_delivery_partner": bool(self.is_delivery_partner),
            "is_manager": bool(self.is_manager),
            "is_verified": bool(self.is_verified),
            "has_seen_welcome": bool(self.has_seen_welcome),
        }

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role})>"
