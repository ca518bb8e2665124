# localcooks/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each factory builds a request-scoped service on the request's session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.application_service import ApplicationService
from ...services.location_service import LocationService
from ...services.microlearning_service import MicrolearningService
from ...services.notification_service import NotificationService
from ...services.platform_settings_service import PlatformSettingsService
from ...services.storage_checkout_service import StorageCheckoutService
from ...services.stripe_connect_service import StripeConnectService
from ...services.user_service import UserService
from .database import get_db


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_location_service(db: Session = Depends(get_db)) -> LocationService:
    return LocationService(db)


def get_platform_settings_service(db: Session = Depends(get_db)) -> PlatformSettingsService:
    return PlatformSettingsService(db)


def get_storage_checkout_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> StorageCheckoutService:
    return StorageCheckoutService(db, notification_service)


def get_stripe_connect_service(db: Session = Depends(get_db)) -> StripeConnectService:
    return StripeConnectService(db)


def get_microlearning_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MicrolearningService:
    return MicrolearningService(db, notification_service)


def get_application_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> ApplicationService:
    return ApplicationService(db, notification_service)
