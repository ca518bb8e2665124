# localcooks/services/stripe_connect_service.py
"""
Stripe Connect Express onboarding for managers and chefs.

One service backs both the manager and chef routes; the caller's role only
changes the return/refresh URLs and the account metadata. All calls into the
Stripe SDK are blocking, so async routes run them via ``asyncio.to_thread``.
"""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session
import stripe

from ..core.config import settings
from ..core.constants import PLATFORM_SLUG, STRIPE_CONNECT_COUNTRY
from ..core.exceptions import ServiceException, StripeConnectAccountMissing
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.user_repository import UserRepository
from .base import BaseService

ONBOARDING_NOT_STARTED = "not_started"
ONBOARDING_IN_PROGRESS = "in_progress"
ONBOARDING_COMPLETE = "complete"


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Stripe object, a dict or a test double."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _list_field(obj: Any, name: str) -> List[str]:
    value = _field(obj, name) or []
    return [item for item in value if isinstance(item, str)]


def determine_verification_stage(
    *,
    charges_enabled: bool,
    payouts_enabled: bool,
    details_submitted: bool,
    currently_due: List[str],
    past_due: List[str],
    pending_verification: List[str],
    disabled_reason: Optional[str],
) -> str:
    """Collapse Stripe's account state into one stage for the onboarding UI (first match wins)."""
    if charges_enabled and payouts_enabled:
        return "complete"
    if disabled_reason and "rejected" in disabled_reason:
        return "rejected"
    if past_due:
        return "past_due"
    if pending_verification and details_submitted:
        return "pending_verification"
    if details_submitted and currently_due:
        return "requires_additional_info"
    if details_submitted and not payouts_enabled:
        return "payouts_disabled"
    if details_submitted and not charges_enabled:
        return "charges_disabled"
    if not details_submitted and currently_due:
        return "details_needed"
    if details_submitted:
        return "pending_verification"
    return "incomplete"


def summarize_account(account: Any) -> Dict[str, Any]:
    """Flatten a retrieved Stripe account into the status payload fields."""
    charges_enabled = bool(_field(account, "charges_enabled", False))
    payouts_enabled = bool(_field(account, "payouts_enabled", False))
    details_submitted = bool(_field(account, "details_submitted", False))
    requirements = _field(account, "requirements")
    currently_due = _list_field(requirements, "currently_due")
    past_due = _list_field(requirements, "past_due")
    pending_verification = _list_field(requirements, "pending_verification")
    disabled_reason = _field(requirements, "disabled_reason")

    if charges_enabled and payouts_enabled:
        status = "complete"
    elif details_submitted:
        status = "pending"
    else:
        status = "incomplete"

    return {
        "connected": True,
        "has_account": True,
        "account_id": _field(account, "id"),
        "payouts_enabled": payouts_enabled,
        "charges_enabled": charges_enabled,
        "details_submitted": details_submitted,
        "status": status,
        "verification_stage": determine_verification_stage(
            charges_enabled=charges_enabled,
            payouts_enabled=payouts_enabled,
            details_submitted=details_submitted,
            currently_due=currently_due,
            past_due=past_due,
            pending_verification=pending_verification,
            disabled_reason=disabled_reason,
        ),
        "disabled_reason": disabled_reason,
        "requirements": {
            "currently_due": currently_due,
            "past_due": past_due,
            "pending_verification": pending_verification,
            "current_deadline": _field(requirements, "current_deadline"),
        },
    }


class StripeConnectService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = UserRepository(db)
        self.stripe_configured = settings.stripe_configured
        if self.stripe_configured:
            stripe.api_key = settings.stripe_secret_key.get_secret_value()
            stripe.max_network_retries = 1

    def _require_stripe(self) -> None:
        if not self.stripe_configured:
            raise ServiceException("Stripe is not configured", code="stripe_not_configured")

    @staticmethod
    def _require_account(user: User) -> str:
        if not user.stripe_connect_account_id:
            raise StripeConnectAccountMissing()
        return str(user.stripe_connect_account_id)

    # URLs

    @staticmethod
    def build_onboarding_urls(role: str, from_setup: bool = False) -> Dict[str, str]:
        base = settings.frontend_url
        refresh_params = {"role": role}
        return_params = {"success": "true", "role": role}
        if from_setup:
            refresh_params["from"] = "setup"
            return_params["from"] = "setup"
        return {
            "refresh_url": f"{base}/{role}/stripe-connect/refresh?{urlencode(refresh_params)}",
            "return_url": f"{base}/{role}/stripe-connect/return?{urlencode(return_params)}",
        }

    # Stripe calls

    def _retrieve_account(self, account_id: str) -> Any:
        self._require_stripe()
        try:
            return stripe.Account.retrieve(account_id)
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error retrieving account {account_id}: {str(e)}")
            raise ServiceException(f"Failed to retrieve Stripe account: {str(e)}")

    def _create_account_link(self, account_id: str, role: str, from_setup: bool) -> str:
        self._require_stripe()
        urls = self.build_onboarding_urls(role, from_setup)
        try:
            account_link = stripe.AccountLink.create(
                account=account_id,
                refresh_url=urls["refresh_url"],
                return_url=urls["return_url"],
                type="account_onboarding",
            )
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error creating account link: {str(e)}")
            raise ServiceException(f"Failed to create onboarding link: {str(e)}")
        return str(_field(account_link, "url", "") or "")

    @staticmethod
    def _is_ready(account: Any) -> bool:
        return bool(_field(account, "charges_enabled")) and bool(_field(account, "payouts_enabled"))

    # Operations

    @BaseService.measure_operation("stripe_connect_create")
    def create_or_resume(self, user: User, role: str, from_setup: bool = False) -> Dict[str, Any]:
        """
        Create an Express account for the user, or resume an existing one.

        Returns ``{already_exists, account_id}`` for a ready account, an
        onboarding ``url`` for an unfinished one, and ``{account_id, url}``
        after creating a new account.
        """
        self._require_stripe()

        if user.stripe_connect_account_id:
            account = self._retrieve_account(user.stripe_connect_account_id)
            if self._is_ready(account):
                return {"already_exists": True, "account_id": user.stripe_connect_account_id}
            url = self._create_account_link(user.stripe_connect_account_id, role, from_setup)
            prometheus_metrics.record_stripe_onboarding(role, "resumed")
            return {"account_id": user.stripe_connect_account_id, "url": url}

        try:
            account = stripe.Account.create(
                type="express",
                country=STRIPE_CONNECT_COUNTRY,
                email=user.username,
                capabilities={
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                metadata={"user_id": user.id, "role": role, "platform": PLATFORM_SLUG},
            )
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error creating connected account: {str(e)}")
            raise ServiceException(f"Failed to create Stripe account: {str(e)}")

        account_id = str(_field(account, "id"))
        with self.transaction():
            user.stripe_connect_account_id = account_id
            user.stripe_connect_onboarding_status = ONBOARDING_IN_PROGRESS
        self.logger.info(f"Created Stripe Express account {account_id} for user {user.id} ({role})")
        prometheus_metrics.record_stripe_onboarding(role, "created")

        url = self._create_account_link(account_id, role, from_setup)
        return {"account_id": account_id, "url": url}

    @BaseService.measure_operation("stripe_connect_onboarding_link")
    def get_onboarding_link(self, user: User, role: str, from_setup: bool = False) -> Dict[str, Any]:
        account_id = self._require_account(user)
        return {"url": self._create_account_link(account_id, role, from_setup)}

    @BaseService.measure_operation("stripe_connect_dashboard_link")
    def get_dashboard_link(self, user: User, role: str) -> Dict[str, Any]:
        account_id = self._require_account(user)
        account = self._retrieve_account(account_id)
        if not self._is_ready(account):
            return {
                "url": self._create_account_link(account_id, role, False),
                "requires_onboarding": True,
            }
        try:
            link = stripe.Account.create_login_link(account_id)
        except stripe.StripeError as e:
            self.logger.error(f"Stripe error creating login link: {str(e)}")
            raise ServiceException(f"Failed to create dashboard link: {str(e)}")
        return {"url": str(_field(link, "url", "") or "")}

    @BaseService.measure_operation("stripe_connect_status")
    def get_status(self, user: User) -> Dict[str, Any]:
        if not user.stripe_connect_account_id:
            return {
                "connected": False,
                "has_account": False,
                "account_id": None,
                "payouts_enabled": False,
                "charges_enabled": False,
                "details_submitted": False,
                "status": ONBOARDING_NOT_STARTED,
            }

        try:
            account = self._retrieve_account(user.stripe_connect_account_id)
        except ServiceException as e:
            self.logger.warning(
                f"Falling back to stored Stripe status for user {user.id}: {e.message}"
            )
            return {
                "connected": True,
                "has_account": True,
                "account_id": user.stripe_connect_account_id,
                "status": user.stripe_connect_onboarding_status or ONBOARDING_IN_PROGRESS,
                "verification_stage": "unknown",
            }

        summary = summarize_account(account)
        stored = ONBOARDING_COMPLETE if summary["status"] == "complete" else ONBOARDING_IN_PROGRESS
        if user.stripe_connect_onboarding_status != stored:
            with self.transaction():
                user.stripe_connect_onboarding_status = stored
        return summary

    @BaseService.measure_operation("stripe_connect_sync")
    def sync(self, user: User) -> Dict[str, Any]:
        account_id = self._require_account(user)
        account = self._retrieve_account(account_id)
        summary = summarize_account(account)
        stored = ONBOARDING_COMPLETE if summary["details_submitted"] else ONBOARDING_IN_PROGRESS
        with self.transaction():
            user.stripe_connect_onboarding_status = stored
        self.logger.info(f"Synced Stripe status for user {user.id}: {stored}")
        return {
            "success": True,
            "onboarding_status": stored,
            "status": summary,
        }

    # Webhooks

    def construct_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """
        Verify a webhook payload against every configured secret.

        Returns the payload as a plain dict once a secret verifies it.

        Raises:
            ValueError: no secret verified the signature
        """
        secrets = settings.webhook_secrets
        if not secrets:
            raise ServiceException("Webhook configuration error", code="webhook_not_configured")
        for secret in secrets:
            try:
                stripe.Webhook.construct_event(payload, signature, secret)
            except stripe.SignatureVerificationError:
                continue
            return json.loads(payload)
        raise ValueError("Invalid signature")

    @BaseService.measure_operation("stripe_connect_webhook")
    def handle_webhook_event(self, event: Dict[str, Any]) -> bool:
        """Apply a verified event; returns True when it changed local state."""
        event_type = event.get("type")
        if event_type != "account.updated":
            self.logger.info(f"Acknowledged Stripe event {event_type}")
            return False

        account = event.get("data", {}).get("object", {})
        account_id = _field(account, "id")
        user = self.user_repository.get_by_stripe_account_id(account_id) if account_id else None
        if not user:
            self.logger.warning(f"account.updated for unknown account {account_id}")
            return False

        ready = self._is_ready(account)
        stored = ONBOARDING_COMPLETE if ready else ONBOARDING_IN_PROGRESS
        with self.transaction():
            user.stripe_connect_onboarding_status = stored
        if ready:
            prometheus_metrics.record_stripe_onboarding(user.role or "unknown", "completed")
        self.logger.info(f"account.updated synced user {user.id} to {stored}")
        return True
