"""
Database models for the LocalCooks platform.

The models are organized by functionality:
- Users, roles and chef applications
- Locations, kitchens and storage listings
- Storage bookings, checkout state and damage claims
- Microlearning progress and completion
- Platform settings
"""

from .application import Application, ApplicationStatus
from .location import Kitchen, KitchenLicenseStatus, Location, StorageListing
from .microlearning import MicrolearningCompletion, VideoProgress
from .platform_setting import PlatformSetting
from .storage_booking import (
    CheckoutStatus,
    DamageClaim,
    StorageBooking,
    StorageBookingStatus,
)
from .user import User

__all__ = [
    "Application",
    "ApplicationStatus",
    "CheckoutStatus",
    "DamageClaim",
    "Kitchen",
    "KitchenLicenseStatus",
    "Location",
    "MicrolearningCompletion",
    "PlatformSetting",
    "StorageBooking",
    "StorageBookingStatus",
    "StorageListing",
    "User",
    "VideoProgress",
]
