# localcooks/services/email.py
"""
Email delivery through the Resend API.

When ``EMAIL_ENABLED`` is false the message is logged instead of sent, which
is the default for local development and tests.
"""

import logging
import re
from typing import Any, Dict, Optional

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


class EmailService(BaseService):
    """Sends transactional email; raises ServiceException on provider failure."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.from_email = settings.email_from

    @staticmethod
    def _html_to_text(html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability"""
        return _SPACE_RE.sub(" ", _TAG_RE.sub("", html_content)).strip()

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not settings.email_enabled:
            self.logger.info(f"[EMAIL] Disabled; would send '{subject}' to {to_email}")
            return {"id": None, "skipped": True}

        api_key = settings.resend_api_key.get_secret_value()
        if not api_key:
            raise ServiceException("Resend API key not configured")
        resend.api_key = api_key

        email_data = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content or self._html_to_text(html_content),
        }
        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.logger.error(f"Failed to send email to {to_email}: {e!r}")
            raise ServiceException(f"Failed to send email: {str(e)}")

        self.logger.info(f"Email sent successfully to {to_email} - Subject: {subject}")
        return dict(response)
