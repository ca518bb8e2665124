# localcooks/models/storage_booking.py
"""
Storage booking and damage claim models.

``checkout_status`` tracks the end-of-booking handover: the chef requests a
checkout, then the manager either clears the storage or files a claim.
"""

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class StorageBookingStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class CheckoutStatus:
    ACTIVE = "active"
    CHECKOUT_REQUESTED = "checkout_requested"
    CHECKOUT_APPROVED = "checkout_approved"
    COMPLETED = "completed"
    CHECKOUT_CLAIM_FILED = "checkout_claim_filed"

    FINISHED = (COMPLETED, CHECKOUT_CLAIM_FILED)


class StorageBooking(Base):
    __tablename__ = "storage_bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    storage_listing_id = Column(
        String(26), ForeignKey("storage_listings.id"), nullable=False, index=True
    )
    chef_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default=StorageBookingStatus.PENDING)

    checkout_status = Column(String(32), nullable=False, default=CheckoutStatus.ACTIVE)
    checkout_requested_at = Column(DateTime(timezone=True), nullable=True)
    checkout_approved_at = Column(DateTime(timezone=True), nullable=True)
    checkout_approved_by = Column(String(26), ForeignKey("users.id"), nullable=True)
    checkout_denied_at = Column(DateTime(timezone=True), nullable=True)
    checkout_denied_by = Column(String(26), ForeignKey("users.id"), nullable=True)
    checkout_denial_reason = Column(Text, nullable=True)
    checkout_notes = Column(Text, nullable=True)
    checkout_photo_urls = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    storage_listing = relationship("StorageListing", back_populates="bookings")
    chef = relationship("User", foreign_keys=[chef_id])
    damage_claims = relationship("DamageClaim", back_populates="storage_booking")

    @property
    def location(self):
        listing = self.storage_listing
        if listing is None or listing.kitchen is None:
            return None
        return listing.kitchen.location

    def __repr__(self) -> str:
        return f"<StorageBooking {self.id} checkout={self.checkout_status}>"


class DamageClaim(Base):
    __tablename__ = "damage_claims"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    storage_booking_id = Column(
        String(26), ForeignKey("storage_bookings.id"), nullable=False, index=True
    )
    chef_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    manager_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    location_id = Column(String(26), ForeignKey("locations.id"), nullable=False)
    claim_title = Column(String(255), nullable=False)
    claim_description = Column(Text, nullable=False)
    claimed_amount_cents = Column(Integer, nullable=False)
    damage_date = Column(Date, nullable=True)
    status = Column(String(32), nullable=False, default="submitted")
    chef_response_deadline = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    storage_booking = relationship("StorageBooking", back_populates="damage_claims")
