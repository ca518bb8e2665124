"""Storage checkout request/review schemas."""

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel

# ========== Request Models ==========


class CheckoutRequest(StrictRequestModel):
    """Chef asks the manager to inspect and release the storage unit."""

    checkout_notes: Optional[str] = Field(default=None, description="Notes for the manager")
    checkout_photo_urls: List[str] = Field(
        default_factory=list, description="Photos of the emptied storage"
    )


class CheckoutPhotosRequest(StrictRequestModel):
    photo_urls: List[str] = Field(..., description="Additional checkout photos")


class ClearCheckoutRequest(StrictRequestModel):
    manager_notes: Optional[str] = Field(default=None, description="Internal manager notes")


class StartClaimRequest(StrictRequestModel):
    """Claim details; length and amount rules are enforced by the service."""

    claim_title: Any = Field(default=None, description="Short claim title (5+ chars)")
    claim_description: Any = Field(default=None, description="Claim details (50+ chars)")
    claimed_amount_cents: Any = Field(default=None, description="Claimed amount in cents")
    damage_date: Optional[date] = None
    manager_notes: Optional[str] = None


class StorageCheckoutSettingsUpdate(StrictRequestModel):
    review_window_hours: Optional[int] = None
    extended_claim_window_hours: Optional[int] = None


# ========== Response Models ==========


class CheckoutActionResponse(StrictModel):
    success: bool = True
    message: str
    storage_booking_id: str
    checkout_status: str
    damage_claim_id: Optional[str] = None
    deprecated: Optional[bool] = None


class CheckoutStatusResponse(StrictModel):
    storage_booking_id: str
    checkout_status: str
    checkout_requested_at: Optional[datetime] = None
    checkout_approved_at: Optional[datetime] = None
    checkout_denied_at: Optional[datetime] = None
    checkout_denial_reason: Optional[str] = None
    checkout_photo_urls: List[str] = Field(default_factory=list)
    review_deadline: Optional[datetime] = None
    is_review_expired: bool = False
    extended_claim_deadline: Optional[datetime] = None
    can_file_extended_claim: bool = False


class PendingCheckoutItem(StrictModel):
    storage_booking_id: str
    storage_listing_id: str
    storage_name: str
    storage_type: str
    kitchen_id: str
    kitchen_name: str
    location_id: str
    location_name: str
    chef_id: Optional[str] = None
    chef_email: Optional[str] = None
    start_date: date
    end_date: date
    checkout_requested_at: Optional[datetime] = None
    checkout_notes: Optional[str] = None
    checkout_photo_urls: List[str] = Field(default_factory=list)
    days_until_end: int
    is_overdue: bool
    review_deadline: Optional[datetime] = None
    is_review_expired: bool = False


class PendingCheckoutsResponse(StrictModel):
    pending_checkouts: List[PendingCheckoutItem]


class CheckoutHistoryItem(StrictModel):
    storage_booking_id: str
    storage_name: str
    kitchen_name: str
    location_id: str
    location_name: str
    chef_id: Optional[str] = None
    chef_email: Optional[str] = None
    checkout_status: str
    checkout_requested_at: Optional[datetime] = None
    checkout_approved_at: Optional[datetime] = None
    checkout_notes: Optional[str] = None
    checkout_photo_urls: List[str] = Field(default_factory=list)


class CheckoutHistoryResponse(StrictModel):
    checkout_history: List[CheckoutHistoryItem]


class StorageCheckoutSettingsResponse(StrictModel):
    review_window_hours: int
    extended_claim_window_hours: int
