"""
Repository layer for the LocalCooks platform.

Repositories encapsulate all data access; services never build queries
directly.
"""

from .application_repository import ApplicationRepository
from .base_repository import BaseRepository
from .location_repository import LocationRepository
from .microlearning_repository import MicrolearningCompletionRepository, VideoProgressRepository
from .platform_setting_repository import PlatformSettingRepository
from .storage_booking_repository import DamageClaimRepository, StorageBookingRepository
from .user_repository import UserRepository

__all__ = [
    "ApplicationRepository",
    "BaseRepository",
    "DamageClaimRepository",
    "LocationRepository",
    "MicrolearningCompletionRepository",
    "PlatformSettingRepository",
    "StorageBookingRepository",
    "UserRepository",
    "VideoProgressRepository",
]
