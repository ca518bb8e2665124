# localcooks/services/location_service.py
"""
Location management for kitchen managers.

Handles the manager console's location CRUD, cancellation policy updates and
the admin kitchen-license review. Contact fields are normalized here so the
stored phone numbers are always E.164.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session
import ulid

from ..core.constants import (
    CONTACT_METHODS,
    DEFAULT_CANCELLATION_POLICY_MESSAGE,
    MAX_LOCATIONS_PER_MANAGER,
)
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.phone import validate_and_normalize_phone
from ..core.timezone_utils import is_valid_timezone
from ..models.location import KitchenLicenseStatus, Location
from ..models.user import User
from ..repositories.location_repository import LocationRepository
from .base import BaseService

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)

_PHONE_FIELDS = ("notification_phone", "contact_phone")
_EMAIL_FIELDS = ("notification_email", "contact_email")

# Fields a manager may edit on their own location
_EDITABLE_FIELDS = (
    "name",
    "address",
    "notification_email",
    "notification_phone",
    "contact_email",
    "contact_phone",
    "preferred_contact_method",
    "cancellation_policy_hours",
    "cancellation_policy_message",
    "default_daily_booking_limit",
    "minimum_booking_window_hours",
    "logo_url",
    "brand_image_url",
    "timezone",
    "kitchen_license_url",
    "kitchen_license_expiry",
    "kitchen_terms_url",
)


def _validate_location_id(location_id: str) -> None:
    try:
        ulid.ULID.from_str(location_id)
    except (ValueError, TypeError):
        raise ValidationException("Invalid location ID", code="invalid_location_id")


class LocationService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.location_repository = LocationRepository(db)

    # Reads

    @BaseService.measure_operation("list_public_locations")
    def list_public_locations(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": loc.id,
                "name": loc.name,
                "address": loc.address,
                "logo_url": loc.logo_url,
                "brand_image_url": loc.brand_image_url,
                "timezone": loc.timezone,
            }
            for loc in self.location_repository.list_all()
        ]

    @BaseService.measure_operation("list_manager_locations")
    def list_for_manager(self, manager: User) -> List[Dict[str, Any]]:
        return [loc.to_dict() for loc in self.location_repository.list_for_manager(manager.id)]

    def get_owned_location(self, location_id: str, manager: User) -> Location:
        """Fetch a location the caller may edit (admins may edit any)."""
        _validate_location_id(location_id)
        location = self.location_repository.get_by_id(location_id, load_relationships=False)
        if not location:
            raise NotFoundException("Location not found", code="location_not_found")
        if not manager.is_admin and location.manager_id != manager.id:
            raise ForbiddenException("Access denied to this location", code="location_forbidden")
        return location

    # Writes

    @BaseService.measure_operation("create_location")
    def create_location(self, manager: User, data: Dict[str, Any]) -> Dict[str, Any]:
        name = (data.get("name") or "").strip()
        address = (data.get("address") or "").strip()
        if not name or not address:
            raise ValidationException("Name and address are required")

        owner_id = manager.id
        if manager.is_admin and data.get("manager_id"):
            owner_id = data["manager_id"]

        if self.location_repository.count_for_manager(owner_id) >= MAX_LOCATIONS_PER_MANAGER:
            raise ValidationException(
                f"You can have at most {MAX_LOCATIONS_PER_MANAGER} locations",
                code="location_limit_reached",
            )

        fields = self._clean_fields(data)
        fields.update(name=name, address=address, manager_id=owner_id)

        with self.transaction():
            location = self.location_repository.create(**fields)
        self.logger.info(f"Manager {owner_id} created location {location.id}")
        return location.to_dict()

    @BaseService.measure_operation("update_location")
    def update_location(
        self, location_id: str, manager: User, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        location = self.get_owned_location(location_id, manager)

        if "manager_id" in data and data["manager_id"] not in (None, location.manager_id):
            if not manager.is_admin:
                raise ForbiddenException(
                    "Managers cannot reassign a location", code="location_reassign_forbidden"
                )
            location.manager_id = data["manager_id"]

        for required in ("name", "address"):
            if required in data and not (data[required] or "").strip():
                raise ValidationException("Name and address are required")

        fields = self._clean_fields(data)
        if "kitchen_license_url" in fields and fields["kitchen_license_url"] != location.kitchen_license_url:
            # A new upload goes back through admin review
            fields["kitchen_license_status"] = KitchenLicenseStatus.PENDING
            fields["kitchen_license_approved_by"] = None
            fields["kitchen_license_approved_at"] = None
            fields["kitchen_license_feedback"] = None

        with self.transaction():
            for key, value in fields.items():
                setattr(location, key, value)
            location.updated_at = datetime.now(timezone.utc)
        return location.to_dict()

    @BaseService.measure_operation("update_cancellation_policy")
    def update_cancellation_policy(
        self, location_id: str, manager: User, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        location = self.get_owned_location(location_id, manager)

        hours = data.get("cancellation_policy_hours")
        if hours is not None and hours < 0:
            raise ValidationException("Cancellation policy hours must be 0 or greater")
        limit = data.get("default_daily_booking_limit")
        if limit is not None and not 1 <= limit <= 24:
            raise ValidationException("Daily booking limit must be between 1 and 24")
        window = data.get("minimum_booking_window_hours")
        if window is not None and not 0 <= window <= 168:
            raise ValidationException("Minimum booking window must be between 0 and 168 hours")

        with self.transaction():
            if hours is not None:
                location.cancellation_policy_hours = hours
            if data.get("cancellation_policy_message") is not None:
                message = data["cancellation_policy_message"].strip()
                location.cancellation_policy_message = message or DEFAULT_CANCELLATION_POLICY_MESSAGE
            if limit is not None:
                location.default_daily_booking_limit = limit
            if window is not None:
                location.minimum_booking_window_hours = window
            location.updated_at = datetime.now(timezone.utc)
        return location.to_dict()

    @BaseService.measure_operation("delete_location")
    def delete_location(self, location_id: str, manager: User) -> None:
        location = self.get_owned_location(location_id, manager)
        with self.transaction():
            self.location_repository.delete(location.id)
        self.logger.info(f"User {manager.id} deleted location {location_id}")

    @BaseService.measure_operation("review_kitchen_license")
    def review_kitchen_license(
        self,
        location_id: str,
        admin: User,
        status: str,
        feedback: Optional[str] = None,
        expiry: Optional[date] = None,
    ) -> Dict[str, Any]:
        if status not in (KitchenLicenseStatus.APPROVED, KitchenLicenseStatus.REJECTED):
            raise ValidationException("Status must be approved or rejected")
        _validate_location_id(location_id)
        location = self.location_repository.get_by_id(location_id, load_relationships=False)
        if not location:
            raise NotFoundException("Location not found", code="location_not_found")

        if status == KitchenLicenseStatus.APPROVED and expiry is None:
            raise ValidationException("License expiry date is required when approving")

        with self.transaction():
            location.kitchen_license_status = status
            location.kitchen_license_feedback = feedback
            if status == KitchenLicenseStatus.APPROVED:
                location.kitchen_license_approved_by = admin.id
                location.kitchen_license_approved_at = datetime.now(timezone.utc)
                location.kitchen_license_expiry = expiry
            else:
                location.kitchen_license_approved_by = None
                location.kitchen_license_approved_at = None
        self.logger.info(f"Admin {admin.id} set kitchen license {status} for {location_id}")
        return location.to_dict()

    # Helpers

    def _clean_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        fields = {key: data[key] for key in _EDITABLE_FIELDS if key in data}

        for key in _PHONE_FIELDS:
            raw = fields.get(key)
            if raw is None:
                continue
            if not str(raw).strip():
                fields[key] = None
                continue
            normalized = validate_and_normalize_phone(raw)
            if not normalized:
                raise ValidationException(
                    "Please enter a valid phone number (e.g., (416) 123-4567 or +14161234567)",
                    code="invalid_phone",
                    details={"field": key},
                )
            fields[key] = normalized

        for key in _EMAIL_FIELDS:
            raw = fields.get(key)
            if raw is None:
                continue
            value = str(raw).strip()
            if not value:
                fields[key] = None
                continue
            try:
                _email_adapter.validate_python(value)
            except ValidationError:
                raise ValidationException(
                    "Please enter a valid email address",
                    code="invalid_email",
                    details={"field": key},
                )
            fields[key] = value

        method = fields.get("preferred_contact_method")
        if method is not None and method not in CONTACT_METHODS:
            raise ValidationException("Preferred contact method must be email, phone or both")

        tz_name = fields.get("timezone")
        if tz_name is not None and not is_valid_timezone(tz_name):
            raise ValidationException(f"Unknown timezone: {tz_name}", code="invalid_timezone")

        return fields
