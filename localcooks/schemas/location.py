"""
Location schemas for the manager console and public listing.

Validation of phones, emails and ownership happens in LocationService so the
client receives the same 400 messages regardless of which field failed.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class LocationBase(StrictRequestModel):
    notification_email: Optional[str] = None
    notification_phone: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    cancellation_policy_hours: Optional[int] = Field(default=None, ge=0)
    cancellation_policy_message: Optional[str] = None
    default_daily_booking_limit: Optional[int] = None
    minimum_booking_window_hours: Optional[int] = None
    logo_url: Optional[str] = None
    brand_image_url: Optional[str] = None
    timezone: Optional[str] = None
    kitchen_license_url: Optional[str] = None
    kitchen_license_expiry: Optional[date] = None
    kitchen_terms_url: Optional[str] = None


class LocationCreate(LocationBase):
    name: Optional[str] = Field(default=None, description="Display name")
    address: Optional[str] = Field(default=None, description="Street address")
    manager_id: Optional[str] = Field(
        default=None, description="Owning manager (admins only; managers always own)"
    )


class LocationUpdate(LocationBase):
    name: Optional[str] = None
    address: Optional[str] = None
    manager_id: Optional[str] = None


class CancellationPolicyUpdate(StrictRequestModel):
    cancellation_policy_hours: Optional[int] = None
    cancellation_policy_message: Optional[str] = None
    default_daily_booking_limit: Optional[int] = None
    minimum_booking_window_hours: Optional[int] = None


class KitchenLicenseReview(StrictRequestModel):
    status: str = Field(..., description="approved or rejected")
    feedback: Optional[str] = None
    expiry: Optional[date] = None


class LocationResponse(StrictModel):
    id: str
    name: str
    address: str
    manager_id: Optional[str] = None
    notification_email: Optional[str] = None
    notification_phone: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    preferred_contact_method: str = "email"
    cancellation_policy_hours: int
    cancellation_policy_message: str
    default_daily_booking_limit: int
    minimum_booking_window_hours: int
    logo_url: Optional[str] = None
    brand_image_url: Optional[str] = None
    timezone: str
    kitchen_license_url: Optional[str] = None
    kitchen_license_status: str
    kitchen_license_approved_by: Optional[str] = None
    kitchen_license_approved_at: Optional[datetime] = None
    kitchen_license_feedback: Optional[str] = None
    kitchen_license_expiry: Optional[date] = None
    kitchen_terms_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PublicLocationResponse(StrictModel):
    id: str
    name: str
    address: str
    logo_url: Optional[str] = None
    brand_image_url: Optional[str] = None
    timezone: str
