# localcooks/services/application_service.py
"""Chef application intake and admin review."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.phone import validate_and_normalize_phone
from ..models.application import Application, ApplicationStatus
from ..models.user import User
from ..repositories.application_repository import ApplicationRepository
from .base import BaseService
from .notification_service import NotificationService

CERTIFICATION_ANSWERS = ("yes", "no", "notSure")
KITCHEN_PREFERENCES = ("commercial", "home", "notSure")
MIN_FULL_NAME_LENGTH = 2


class ApplicationService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.application_repository = ApplicationRepository(db)
        self.notification_service = notification_service or NotificationService(db)

    @BaseService.measure_operation("submit_application")
    def submit(self, user: User, data: Dict[str, Any]) -> Application:
        full_name = (data.get("full_name") or "").strip()
        if len(full_name) < MIN_FULL_NAME_LENGTH:
            raise ValidationException(
                f"Full name must be at least {MIN_FULL_NAME_LENGTH} characters",
                details={"field": "fullName"},
            )

        phone = validate_and_normalize_phone(data.get("phone"))
        if not phone:
            raise ValidationException(
                "Please enter a valid phone number (e.g., (416) 123-4567 or +14161234567)",
                code="invalid_phone",
                details={"field": "phone"},
            )

        for key in ("food_safety_license", "food_establishment_cert"):
            if data.get(key) not in CERTIFICATION_ANSWERS:
                raise ValidationException(
                    "Please answer yes, no or not sure", details={"field": key}
                )
        if data.get("kitchen_preference") not in KITCHEN_PREFERENCES:
            raise ValidationException(
                "Please choose a kitchen preference", details={"field": "kitchenPreference"}
            )

        with self.transaction():
            application = self.application_repository.create(
                user_id=user.id,
                full_name=full_name,
                email=str(data["email"]).strip().lower(),
                phone=phone,
                food_safety_license=data["food_safety_license"],
                food_establishment_cert=data["food_establishment_cert"],
                kitchen_preference=data["kitchen_preference"],
                feedback=data.get("feedback"),
                status=ApplicationStatus.IN_REVIEW,
            )
        self.logger.info(f"User {user.id} submitted application {application.id}")
        return application

    def list_for_user(self, user: User) -> List[Application]:
        return self.application_repository.list_for_user(user.id)

    def list_all(self) -> List[Application]:
        return self.application_repository.list_all()

    def _get_or_404(self, application_id: str) -> Application:
        application = self.application_repository.get_by_id(
            application_id, load_relationships=False
        )
        if not application:
            raise NotFoundException("Application not found", code="application_not_found")
        return application

    @BaseService.measure_operation("update_application_status")
    def update_status(self, application_id: str, status: str, admin: User) -> Application:
        if status not in ApplicationStatus.ALL:
            raise ValidationException(
                "Status must be one of: " + ", ".join(ApplicationStatus.ALL),
                code="invalid_application_status",
            )
        application = self._get_or_404(application_id)
        with self.transaction():
            application.status = status
        self.logger.info(f"Admin {admin.id} set application {application.id} to {status}")
        self.notification_service.send_application_status(application)
        return application

    @BaseService.measure_operation("cancel_application")
    def cancel(self, application_id: str, user: User) -> Application:
        application = self._get_or_404(application_id)
        if application.user_id != user.id:
            raise ForbiddenException(
                "You can only cancel your own applications", code="application_forbidden"
            )
        with self.transaction():
            application.status = ApplicationStatus.CANCELLED
        return application
