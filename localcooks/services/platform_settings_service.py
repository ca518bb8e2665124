# localcooks/services/platform_settings_service.py
"""
Admin-editable platform settings.

Values are stored as strings in ``platform_settings``; missing or unparseable
rows fall back to the built-in defaults below.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..models.user import User
from ..repositories.platform_setting_repository import PlatformSettingRepository
from .base import BaseService

REVIEW_WINDOW_KEY = "storage_checkout_review_window_hours"
EXTENDED_CLAIM_WINDOW_KEY = "storage_checkout_extended_claim_window_hours"

MIN_CHECKOUT_WINDOW_HOURS = 2
MAX_CHECKOUT_WINDOW_HOURS = 168

DAMAGE_CLAIM_DEFAULTS: Dict[str, int] = {
    "damage_claim_min_amount_cents": 1000,
    "damage_claim_max_amount_cents": 500000,
    "damage_claim_max_per_booking": 3,
    "damage_claim_chef_response_deadline_hours": 72,
}

CHECKOUT_WINDOW_DEFAULTS: Dict[str, int] = {
    REVIEW_WINDOW_KEY: 2,
    EXTENDED_CLAIM_WINDOW_KEY: 48,
}


@dataclass(frozen=True)
class StorageCheckoutSettings:
    review_window_hours: int
    extended_claim_window_hours: int


@dataclass(frozen=True)
class DamageClaimLimits:
    min_claim_amount_cents: int
    max_claim_amount_cents: int
    max_claims_per_booking: int
    chef_response_deadline_hours: int


class PlatformSettingsService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.setting_repository = PlatformSettingRepository(db)

    def _read_ints(self, defaults: Dict[str, int]) -> Dict[str, int]:
        stored = self.setting_repository.get_values(defaults.keys())
        values: Dict[str, int] = {}
        for key, default in defaults.items():
            raw = stored.get(key)
            try:
                values[key] = int(raw) if raw is not None else default
            except ValueError:
                self.logger.warning(f"Ignoring non-integer platform setting {key}={raw!r}")
                values[key] = default
        return values

    def get_storage_checkout_settings(self) -> StorageCheckoutSettings:
        values = self._read_ints(CHECKOUT_WINDOW_DEFAULTS)
        return StorageCheckoutSettings(
            review_window_hours=values[REVIEW_WINDOW_KEY],
            extended_claim_window_hours=values[EXTENDED_CLAIM_WINDOW_KEY],
        )

    @BaseService.measure_operation("update_storage_checkout_settings")
    def update_storage_checkout_settings(
        self,
        admin: User,
        review_window_hours: Optional[int] = None,
        extended_claim_window_hours: Optional[int] = None,
    ) -> StorageCheckoutSettings:
        updates = {
            REVIEW_WINDOW_KEY: review_window_hours,
            EXTENDED_CLAIM_WINDOW_KEY: extended_claim_window_hours,
        }
        for key, value in updates.items():
            if value is None:
                continue
            if not MIN_CHECKOUT_WINDOW_HOURS <= value <= MAX_CHECKOUT_WINDOW_HOURS:
                raise ValidationException(
                    f"Checkout windows must be between {MIN_CHECKOUT_WINDOW_HOURS} and "
                    f"{MAX_CHECKOUT_WINDOW_HOURS} hours",
                    code="invalid_checkout_window",
                    details={"setting": key},
                )

        with self.transaction():
            for key, value in updates.items():
                if value is not None:
                    self.setting_repository.upsert(key, str(value), updated_by=admin.id)
        self.logger.info(f"Admin {admin.id} updated storage checkout settings")
        return self.get_storage_checkout_settings()

    def get_damage_claim_limits(self) -> DamageClaimLimits:
        values = self._read_ints(DAMAGE_CLAIM_DEFAULTS)
        return DamageClaimLimits(
            min_claim_amount_cents=values["damage_claim_min_amount_cents"],
            max_claim_amount_cents=values["damage_claim_max_amount_cents"],
            max_claims_per_booking=values["damage_claim_max_per_booking"],
            chef_response_deadline_hours=values["damage_claim_chef_response_deadline_hours"],
        )
