# localcooks/services/storage_checkout_service.py
"""
Storage checkout workflow.

A chef asks to check out of a storage booking; the location manager inspects
the unit and either clears it (booking completed) or starts a damage claim.
The older "deny" action survives only as a deprecated alias of clear.

Checkout status transitions:
    active -> checkout_requested -> completed
                                 -> checkout_claim_filed
"""

from datetime import date, datetime, timedelta, timezone
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_CHECKOUT_PHOTOS, MIN_CLAIM_DESCRIPTION_LENGTH, MIN_CLAIM_TITLE_LENGTH
from ..core.exceptions import CheckoutStateException, NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc, get_location_today
from ..models.storage_booking import (
    CheckoutStatus,
    DamageClaim,
    StorageBooking,
    StorageBookingStatus,
)
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.location_repository import LocationRepository
from ..repositories.storage_booking_repository import (
    DamageClaimRepository,
    StorageBookingRepository,
)
from .base import BaseService
from .notification_service import NotificationService
from .platform_settings_service import PlatformSettingsService

ACTION_CLEAR = "clear"
ACTION_START_CLAIM = "start_claim"
ACTION_DENY = "deny"
CHECKOUT_ACTIONS = (ACTION_CLEAR, ACTION_START_CLAIM, ACTION_DENY)

CLEAR_MESSAGE = "Storage cleared — no issues found. Booking completed."
START_CLAIM_MESSAGE = "Damage/cleaning claim started. The chef will be notified."
DENY_DEPRECATED_MESSAGE = (
    "DEPRECATED: Deny is no longer supported. Storage has been cleared instead. "
    "Use /clear-checkout or /start-claim."
)
REQUEST_MESSAGE = "Checkout request submitted. The manager will review your storage unit."


class StorageCheckoutService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.booking_repository = StorageBookingRepository(db)
        self.claim_repository = DamageClaimRepository(db)
        self.location_repository = LocationRepository(db)
        self.settings_service = PlatformSettingsService(db)
        self.notification_service = notification_service or NotificationService(db)

    # Chef side

    @BaseService.measure_operation("request_checkout")
    def request_checkout(
        self,
        booking_id: str,
        chef: User,
        checkout_notes: Optional[str] = None,
        checkout_photo_urls: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise ValidationException("Storage booking not found", code="booking_not_found")
        if booking.chef_id != chef.id:
            raise ValidationException(
                "You do not have permission to checkout this storage booking",
                code="checkout_forbidden",
            )
        if booking.status == StorageBookingStatus.CANCELLED:
            raise ValidationException("Cannot checkout a cancelled booking")

        current = booking.checkout_status or CheckoutStatus.ACTIVE
        if current == CheckoutStatus.CHECKOUT_REQUESTED:
            raise ValidationException("Checkout has already been requested for this booking")
        if current == CheckoutStatus.CHECKOUT_APPROVED:
            raise ValidationException("Checkout has already been approved for this booking")
        if current in CheckoutStatus.FINISHED:
            raise ValidationException("This booking has already been completed")

        photos = [url for url in (checkout_photo_urls or []) if url]
        if len(photos) > MAX_CHECKOUT_PHOTOS:
            raise ValidationException(f"Maximum {MAX_CHECKOUT_PHOTOS} checkout photos allowed")

        now = datetime.now(timezone.utc)
        with self.transaction():
            booking.checkout_status = CheckoutStatus.CHECKOUT_REQUESTED
            booking.checkout_requested_at = now
            booking.checkout_notes = checkout_notes
            booking.checkout_photo_urls = photos
            booking.checkout_denied_at = None
            booking.checkout_denied_by = None
            booking.checkout_denial_reason = None

        self.logger.info(f"Chef {chef.id} requested checkout for storage booking {booking.id}")
        settings = self.settings_service.get_storage_checkout_settings()
        self.notification_service.send_checkout_requested(booking, settings.review_window_hours)

        return {
            "success": True,
            "message": REQUEST_MESSAGE,
            "storage_booking_id": booking.id,
            "checkout_status": booking.checkout_status,
        }

    @BaseService.measure_operation("add_checkout_photos")
    def add_checkout_photos(self, booking_id: str, chef: User, photo_urls: List[str]) -> Dict[str, Any]:
        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise ValidationException("Storage booking not found", code="booking_not_found")
        if booking.chef_id != chef.id:
            raise ValidationException(
                "You do not have permission to checkout this storage booking",
                code="checkout_forbidden",
            )
        if booking.checkout_status != CheckoutStatus.CHECKOUT_REQUESTED:
            raise ValidationException("Can only add photos to pending checkout requests")

        combined = list(booking.checkout_photo_urls or []) + [url for url in photo_urls if url]
        if len(combined) > MAX_CHECKOUT_PHOTOS:
            raise ValidationException(f"Maximum {MAX_CHECKOUT_PHOTOS} checkout photos allowed")

        with self.transaction():
            # JSON columns only notice reassignment
            booking.checkout_photo_urls = combined
        return {
            "success": True,
            "message": f"{len(photo_urls)} photo(s) added",
            "storage_booking_id": booking.id,
            "checkout_status": booking.checkout_status,
        }

    def get_checkout_status(
        self, booking_id: str, user: User, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException("Storage booking not found", code="booking_not_found")
        location = booking.location
        owns_location = location is not None and location.manager_id == user.id
        if booking.chef_id != user.id and not owns_location and not user.is_admin:
            raise ValidationException(
                "You do not have permission to view this storage booking",
                code="checkout_forbidden",
            )

        current = now or datetime.now(timezone.utc)
        windows = self._review_windows(booking, current)
        return {
            "storage_booking_id": booking.id,
            "checkout_status": booking.checkout_status or CheckoutStatus.ACTIVE,
            "checkout_requested_at": ensure_utc(booking.checkout_requested_at),
            "checkout_approved_at": ensure_utc(booking.checkout_approved_at),
            "checkout_denied_at": ensure_utc(booking.checkout_denied_at),
            "checkout_denial_reason": booking.checkout_denial_reason,
            "checkout_photo_urls": list(booking.checkout_photo_urls or []),
            **windows,
        }

    # Manager side

    def list_pending_checkouts(
        self, manager: User, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        current = now or datetime.now(timezone.utc)
        location_ids = self.location_repository.location_ids_for_manager(manager.id)
        items = []
        for booking in self.booking_repository.list_pending_checkouts(location_ids):
            listing = booking.storage_listing
            kitchen = listing.kitchen
            location = kitchen.location
            days_until_end = _days_until(booking.end_date, get_location_today(location, current))
            windows = self._review_windows(booking, current)
            items.append(
                {
                    "storage_booking_id": booking.id,
                    "storage_listing_id": listing.id,
                    "storage_name": listing.name or "Storage",
                    "storage_type": listing.storage_type or "dry",
                    "kitchen_id": kitchen.id,
                    "kitchen_name": kitchen.name or "Kitchen",
                    "location_id": location.id,
                    "location_name": location.name or "Location",
                    "chef_id": booking.chef_id,
                    "chef_email": booking.chef.username if booking.chef else None,
                    "start_date": booking.start_date,
                    "end_date": booking.end_date,
                    "checkout_requested_at": ensure_utc(booking.checkout_requested_at),
                    "checkout_notes": booking.checkout_notes,
                    "checkout_photo_urls": list(booking.checkout_photo_urls or []),
                    "days_until_end": days_until_end,
                    "is_overdue": days_until_end < 0,
                    "review_deadline": windows["review_deadline"],
                    "is_review_expired": windows["is_review_expired"],
                }
            )
        return items

    def list_checkout_history(self, manager: User, limit: int = 20) -> List[Dict[str, Any]]:
        limit = max(1, min(limit, 100))
        location_ids = self.location_repository.location_ids_for_manager(manager.id)
        history = []
        for booking in self.booking_repository.list_checkout_history(location_ids, limit):
            listing = booking.storage_listing
            kitchen = listing.kitchen
            history.append(
                {
                    "storage_booking_id": booking.id,
                    "storage_name": listing.name or "Storage",
                    "kitchen_name": kitchen.name or "Kitchen",
                    "location_id": kitchen.location.id,
                    "location_name": kitchen.location.name or "Location",
                    "chef_id": booking.chef_id,
                    "chef_email": booking.chef.username if booking.chef else None,
                    "checkout_status": booking.checkout_status,
                    "checkout_requested_at": ensure_utc(booking.checkout_requested_at),
                    "checkout_approved_at": ensure_utc(booking.checkout_approved_at),
                    "checkout_notes": booking.checkout_notes,
                    "checkout_photo_urls": list(booking.checkout_photo_urls or []),
                }
            )
        return history

    @BaseService.measure_operation("process_checkout")
    def process_checkout(
        self,
        booking_id: str,
        manager: User,
        action: str,
        manager_notes: Optional[str] = None,
        claim: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Apply a manager decision to a requested checkout.

        Args:
            action: ``clear``, ``start_claim`` or the deprecated ``deny``
            claim: title/description/amount/damage_date for ``start_claim``

        Raises:
            ValidationException: unknown booking, foreign location, wrong
                status or an invalid claim
        """
        if action not in CHECKOUT_ACTIONS:
            raise ValidationException(f"Unknown checkout action: {action}")

        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise ValidationException("Storage booking not found", code="booking_not_found")
        manager_id = self.booking_repository.get_manager_id_for_booking(booking.id)
        if manager_id is None or (manager_id != manager.id and not manager.is_admin):
            raise ValidationException(
                "You do not have permission to approve this checkout",
                code="checkout_forbidden",
            )
        if booking.checkout_status != CheckoutStatus.CHECKOUT_REQUESTED:
            raise CheckoutStateException(booking.checkout_status)

        if action == ACTION_START_CLAIM:
            result = self._start_claim(booking, manager, claim or {}, manager_notes)
        else:
            result = self._clear(booking, manager, manager_notes)
            if action == ACTION_DENY:
                self.logger.warning(
                    f"Deprecated deny-checkout used by {manager.id} on booking {booking.id}"
                )
                result["deprecated"] = True
                result["message"] = DENY_DEPRECATED_MESSAGE

        prometheus_metrics.record_checkout_decision(action)
        return result

    def _clear(self, booking: StorageBooking, manager: User, manager_notes: Optional[str]) -> Dict[str, Any]:
        with self.transaction():
            booking.checkout_status = CheckoutStatus.COMPLETED
            booking.checkout_approved_at = datetime.now(timezone.utc)
            booking.checkout_approved_by = manager.id
            booking.status = StorageBookingStatus.COMPLETED
        self.logger.info(f"Manager {manager.id} cleared checkout for booking {booking.id}")
        self.notification_service.send_checkout_cleared(booking, manager_notes)
        return {
            "success": True,
            "message": CLEAR_MESSAGE,
            "storage_booking_id": booking.id,
            "checkout_status": booking.checkout_status,
        }

    def _start_claim(
        self,
        booking: StorageBooking,
        manager: User,
        claim: Dict[str, Any],
        manager_notes: Optional[str],
    ) -> Dict[str, Any]:
        title = claim.get("claim_title")
        description = claim.get("claim_description")
        amount = claim.get("claimed_amount_cents")

        if not isinstance(title, str) or len(title.strip()) < MIN_CLAIM_TITLE_LENGTH:
            raise ValidationException(
                f"Claim title must be at least {MIN_CLAIM_TITLE_LENGTH} characters"
            )
        if not isinstance(description, str) or len(description.strip()) < MIN_CLAIM_DESCRIPTION_LENGTH:
            raise ValidationException(
                f"Claim description must be at least {MIN_CLAIM_DESCRIPTION_LENGTH} characters"
            )
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationException("Claimed amount must be a positive number (in cents)")

        limits = self.settings_service.get_damage_claim_limits()
        if amount < limits.min_claim_amount_cents or amount > limits.max_claim_amount_cents:
            raise ValidationException(
                f"Claimed amount must be between ${limits.min_claim_amount_cents / 100:.2f} "
                f"and ${limits.max_claim_amount_cents / 100:.2f}",
                code="claim_amount_out_of_range",
            )
        if self.claim_repository.count_for_booking(booking.id) >= limits.max_claims_per_booking:
            raise ValidationException(
                f"Maximum {limits.max_claims_per_booking} claims allowed per booking",
                code="claim_limit_reached",
            )

        now = datetime.now(timezone.utc)
        location = booking.location
        damage_date = claim.get("damage_date") or get_location_today(location, now)
        with self.transaction():
            damage_claim: DamageClaim = self.claim_repository.create(
                storage_booking_id=booking.id,
                chef_id=booking.chef_id,
                manager_id=manager.id,
                location_id=location.id,
                claim_title=title.strip(),
                claim_description=description.strip(),
                claimed_amount_cents=amount,
                damage_date=damage_date,
                chef_response_deadline=now + timedelta(hours=limits.chef_response_deadline_hours),
            )
            booking.checkout_status = CheckoutStatus.CHECKOUT_CLAIM_FILED
            booking.checkout_approved_by = manager.id
            if manager_notes:
                booking.checkout_denial_reason = manager_notes

        self.logger.info(
            f"Manager {manager.id} filed claim {damage_claim.id} against booking {booking.id}"
        )
        self.notification_service.send_claim_filed(booking, damage_claim)
        return {
            "success": True,
            "message": START_CLAIM_MESSAGE,
            "storage_booking_id": booking.id,
            "checkout_status": booking.checkout_status,
            "damage_claim_id": damage_claim.id,
        }

    def _review_windows(self, booking: StorageBooking, now: datetime) -> Dict[str, Any]:
        requested_at = ensure_utc(booking.checkout_requested_at)
        if requested_at is None:
            return {
                "review_deadline": None,
                "is_review_expired": False,
                "extended_claim_deadline": None,
                "can_file_extended_claim": False,
            }
        settings = self.settings_service.get_storage_checkout_settings()
        review_deadline = requested_at + timedelta(hours=settings.review_window_hours)
        extended_deadline = requested_at + timedelta(hours=settings.extended_claim_window_hours)
        return {
            "review_deadline": review_deadline,
            "is_review_expired": now > review_deadline,
            "extended_claim_deadline": extended_deadline,
            "can_file_extended_claim": (
                booking.checkout_status in (CheckoutStatus.CHECKOUT_REQUESTED, CheckoutStatus.COMPLETED)
                and now <= extended_deadline
            ),
        }


def _days_until(end_date: date, today: date) -> int:
    seconds = (end_date - today).total_seconds()
    return math.ceil(seconds / 86400)
