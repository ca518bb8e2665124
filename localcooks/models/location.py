# localcooks/models/location.py
"""
Location, kitchen and storage listing models.

A location is a commercial kitchen site owned by a manager. Each location
hosts kitchens, and each kitchen may offer storage listings that chefs book.
Ownership of a storage booking is resolved through
booking -> listing -> kitchen -> location.
"""

from typing import Any, Optional

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import (
    DEFAULT_CANCELLATION_POLICY_HOURS,
    DEFAULT_CANCELLATION_POLICY_MESSAGE,
    DEFAULT_DAILY_BOOKING_LIMIT,
    DEFAULT_LOCATION_TIMEZONE,
    DEFAULT_MINIMUM_BOOKING_WINDOW_HOURS,
)
from ..database import Base


class KitchenLicenseStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class Location(Base):
    """
    A manager-owned kitchen site.

    Attributes:
        name / address: Required display fields
        notification_email / notification_phone: Where booking notices go
        cancellation_policy_*: Hours and message shown to chefs
        kitchen_license_*: License upload and admin review state
    """

    __tablename__ = "locations"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    manager_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)

    notification_email = Column(String(255), nullable=True)
    notification_phone = Column(String(20), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    preferred_contact_method = Column(String(8), nullable=False, default="email")

    cancellation_policy_hours = Column(
        Integer, nullable=False, default=DEFAULT_CANCELLATION_POLICY_HOURS
    )
    cancellation_policy_message = Column(
        Text, nullable=False, default=DEFAULT_CANCELLATION_POLICY_MESSAGE
    )
    default_daily_booking_limit = Column(
        Integer, nullable=False, default=DEFAULT_DAILY_BOOKING_LIMIT
    )
    minimum_booking_window_hours = Column(
        Integer, nullable=False, default=DEFAULT_MINIMUM_BOOKING_WINDOW_HOURS
    )

    logo_url = Column(Text, nullable=True)
    brand_image_url = Column(Text, nullable=True)
    timezone = Column(String(64), nullable=False, default=DEFAULT_LOCATION_TIMEZONE)

    kitchen_license_url = Column(Text, nullable=True)
    kitchen_license_status = Column(String(16), nullable=False, default=KitchenLicenseStatus.PENDING)
    kitchen_license_approved_by = Column(String(26), ForeignKey("users.id"), nullable=True)
    kitchen_license_approved_at = Column(DateTime(timezone=True), nullable=True)
    kitchen_license_feedback = Column(Text, nullable=True)
    kitchen_license_expiry = Column(Date, nullable=True)
    kitchen_terms_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    manager = relationship("User", back_populates="locations", foreign_keys=[manager_id])
    kitchens = relationship("Kitchen", back_populates="location", cascade="all, delete-orphan")

    def rendered_cancellation_message(self) -> str:
        message = self.cancellation_policy_message or DEFAULT_CANCELLATION_POLICY_MESSAGE
        return message.replace("{hours}", str(self.cancellation_policy_hours))

    def notification_target(self) -> Optional[str]:
        if self.notification_email:
            return str(self.notification_email)
        if self.manager is not None:
            return str(self.manager.username)
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "manager_id": self.manager_id,
            "notification_email": self.notification_email,
            "notification_phone": self.notification_phone,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "preferred_contact_method": self.preferred_contact_method,
            "cancellation_policy_hours": self.cancellation_policy_hours,
            "cancellation_policy_message": self.rendered_cancellation_message(),
            "default_daily_booking_limit": self.default_daily_booking_limit,
            "minimum_booking_window_hours": self.minimum_booking_window_hours,
            "logo_url": self.logo_url,
            "brand_image_url": self.brand_image_url,
            "timezone": self.timezone,
            "kitchen_license_url": self.kitchen_license_url,
            "kitchen_license_status": self.kitchen_license_status,
            "kitchen_license_approved_by": self.kitchen_license_approved_by,
            "kitchen_license_approved_at": self.kitchen_license_approved_at,
            "kitchen_license_feedback": self.kitchen_license_feedback,
            "kitchen_license_expiry": self.kitchen_license_expiry,
            "kitchen_terms_url": self.kitchen_terms_url,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return f"<Location {self.name} manager={self.manager_id}>"


class Kitchen(Base):
    __tablename__ = "kitchens"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    location_id = Column(String(26), ForeignKey("locations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    location = relationship("Location", back_populates="kitchens")
    storage_listings = relationship(
        "StorageListing", back_populates="kitchen", cascade="all, delete-orphan"
    )


class StorageListing(Base):
    __tablename__ = "storage_listings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    kitchen_id = Column(String(26), ForeignKey("kitchens.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    storage_type = Column(String(16), nullable=False, default="dry")

    kitchen = relationship("Kitchen", back_populates="storage_listings")
    bookings = relationship("StorageBooking", back_populates="storage_listing")
