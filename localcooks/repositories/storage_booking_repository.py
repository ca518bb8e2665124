"""Repository for storage bookings and the damage claims filed against them."""

from typing import List, Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..models.location import Kitchen, Location, StorageListing
from ..models.storage_booking import CheckoutStatus, DamageClaim, StorageBooking
from .base_repository import BaseRepository


class StorageBookingRepository(BaseRepository[StorageBooking]):
    def __init__(self, db: Session):
        super().__init__(db, StorageBooking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(StorageBooking.storage_listing)
            .joinedload(StorageListing.kitchen)
            .joinedload(Kitchen.location),
            joinedload(StorageBooking.chef),
        )

    def _joined_to_location(self) -> Query:
        return self._apply_eager_loading(
            self._build_query()
            .join(StorageListing, StorageBooking.storage_listing_id == StorageListing.id)
            .join(Kitchen, StorageListing.kitchen_id == Kitchen.id)
            .join(Location, Kitchen.location_id == Location.id)
        )

    def get_manager_id_for_booking(self, booking_id: str) -> Optional[str]:
        row = (
            self.db.query(Location.manager_id)
            .join(Kitchen, Kitchen.location_id == Location.id)
            .join(StorageListing, StorageListing.kitchen_id == Kitchen.id)
            .join(StorageBooking, StorageBooking.storage_listing_id == StorageListing.id)
            .filter(StorageBooking.id == booking_id)
            .first()
        )
        return row[0] if row else None

    def list_pending_checkouts(self, location_ids: List[str]) -> List[StorageBooking]:
        if not location_ids:
            return []
        query = (
            self._joined_to_location()
            .filter(Location.id.in_(location_ids))
            .filter(StorageBooking.checkout_status == CheckoutStatus.CHECKOUT_REQUESTED)
            .order_by(StorageBooking.checkout_requested_at.desc())
        )
        return self._execute_query(query)

    def list_checkout_history(self, location_ids: List[str], limit: int = 20) -> List[StorageBooking]:
        if not location_ids:
            return []
        query = (
            self._joined_to_location()
            .filter(Location.id.in_(location_ids))
            .filter(StorageBooking.checkout_status.in_(CheckoutStatus.FINISHED))
            .order_by(StorageBooking.updated_at.desc(), StorageBooking.id.desc())
            .limit(limit)
        )
        return self._execute_query(query)


class DamageClaimRepository(BaseRepository[DamageClaim]):
    def __init__(self, db: Session):
        super().__init__(db, DamageClaim)

    def count_for_booking(self, booking_id: str) -> int:
        return self.count(storage_booking_id=booking_id)
