# localcooks/services/notification_service.py
"""
Best-effort notifications for checkout, application and training events.

Every public method swallows delivery errors after logging them: a failed
email must never fail the request that triggered it.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Optional

from jinja2 import TemplateError
from sqlalchemy.orm import Session

from ..core.exceptions import ServiceException
from ..models.application import Application
from ..models.storage_booking import DamageClaim, StorageBooking
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from .base import BaseService
from .email import EmailService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class NotificationService(BaseService):
    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        template_service: Optional[TemplateService] = None,
    ):
        super().__init__(db)
        self.email_service = email_service or EmailService(db)
        self.template_service = template_service or TemplateService()

    def _deliver(
        self, template: str, to_email: Optional[str], subject: str, context: Dict[str, Any]
    ) -> bool:
        if not to_email:
            self.logger.warning(f"[NOTIFY] No recipient for {template}; skipping")
            prometheus_metrics.record_notification(template, "skipped")
            return False
        try:
            html = self.template_service.render_template(
                f"email/{template}.html", context, subject=subject
            )
            self.email_service.send_email(to_email, subject, html)
        except (ServiceException, TemplateError, OSError, ValueError) as exc:
            self.logger.error(f"[NOTIFY] Failed to send {template} to {to_email}: {exc}")
            prometheus_metrics.record_notification(template, "error")
            return False
        prometheus_metrics.record_notification(template, "sent")
        return True

    @staticmethod
    def _booking_context(booking: StorageBooking) -> Dict[str, Any]:
        listing = booking.storage_listing
        kitchen = listing.kitchen if listing else None
        location = kitchen.location if kitchen else None
        return {
            "storage_name": listing.name if listing else "Storage",
            "kitchen_name": kitchen.name if kitchen else "",
            "location_name": location.name if location else "",
            "end_date": booking.end_date,
        }

    def send_checkout_requested(self, booking: StorageBooking, review_window_hours: int) -> bool:
        location = booking.location
        recipient = location.notification_target() if location is not None else None
        context = self._booking_context(booking)
        context.update(
            checkout_notes=booking.checkout_notes,
            photo_count=len(booking.checkout_photo_urls or []),
            review_window_hours=review_window_hours,
        )
        return self._deliver(
            "checkout_requested",
            recipient,
            f"Storage checkout requested - {context['storage_name']}",
            context,
        )

    def send_checkout_cleared(self, booking: StorageBooking, manager_notes: Optional[str]) -> bool:
        chef = booking.chef
        context = self._booking_context(booking)
        context["manager_notes"] = manager_notes
        return self._deliver(
            "checkout_cleared",
            chef.username if chef else None,
            f"Storage checkout complete - {context['storage_name']}",
            context,
        )

    def send_claim_filed(self, booking: StorageBooking, claim: DamageClaim) -> bool:
        chef = booking.chef
        context = self._booking_context(booking)
        context.update(
            claim_title=claim.claim_title,
            claim_description=claim.claim_description,
            claim_amount=self.template_service.env.filters["currency"](claim.claimed_amount_cents),
            response_deadline=claim.chef_response_deadline,
        )
        return self._deliver(
            "checkout_claim_filed",
            chef.username if chef else None,
            f"Damage claim filed - {context['storage_name']}",
            context,
        )

    def send_application_status(self, application: Application) -> bool:
        return self._deliver(
            "application_status",
            application.email,
            f"Your application status: {application.status}",
            {"full_name": application.full_name or "Applicant", "status": application.status},
        )

    def send_microlearning_completed(
        self, user: User, completed_at: datetime, module_count: int
    ) -> bool:
        return self._deliver(
            "microlearning_completed",
            user.username,
            "Food safety training complete",
            {
                "display_name": user.display_name or user.username,
                "completed_at": completed_at.strftime("%B %d, %Y"),
                "module_count": module_count,
            },
        )
