"""
Unit tests for StripeConnectService.

The Stripe SDK is patched at the class level (``stripe.Account.retrieve`` and
friends) so no network calls are made.
"""

import hashlib
import hmac
import json
import time
from unittest.mock import patch

import pytest
import stripe

from localcooks.core.exceptions import ServiceException, StripeConnectAccountMissing
from localcooks.services.stripe_connect_service import (
    StripeConnectService,
    determine_verification_stage,
    summarize_account,
)

READY_ACCOUNT = {
    "id": "acct_ready",
    "charges_enabled": True,
    "payouts_enabled": True,
    "details_submitted": True,
    "requirements": {"currently_due": [], "past_due": [], "pending_verification": []},
}

UNFINISHED_ACCOUNT = {
    "id": "acct_unfinished",
    "charges_enabled": False,
    "payouts_enabled": False,
    "details_submitted": False,
    "requirements": {"currently_due": ["external_account"], "past_due": []},
}


def _stage(**overrides):
    params = {
        "charges_enabled": False,
        "payouts_enabled": False,
        "details_submitted": False,
        "currently_due": [],
        "past_due": [],
        "pending_verification": [],
        "disabled_reason": None,
    }
    params.update(overrides)
    return determine_verification_stage(**params)


class TestVerificationStage:
    def test_complete_wins_over_everything(self):
        assert (
            _stage(
                charges_enabled=True,
                payouts_enabled=True,
                past_due=["x"],
                disabled_reason="rejected.fraud",
            )
            == "complete"
        )

    def test_rejected(self):
        assert _stage(disabled_reason="rejected.terms_of_service", past_due=["x"]) == "rejected"

    def test_past_due(self):
        assert _stage(past_due=["individual.id_number"], details_submitted=True) == "past_due"

    def test_pending_verification_needs_submitted_details(self):
        assert (
            _stage(pending_verification=["individual.document"], details_submitted=True)
            == "pending_verification"
        )
        assert _stage(pending_verification=["individual.document"]) == "incomplete"

    def test_requires_additional_info(self):
        assert (
            _stage(details_submitted=True, currently_due=["business_profile.url"])
            == "requires_additional_info"
        )

    def test_payouts_disabled(self):
        assert _stage(details_submitted=True, charges_enabled=True) == "payouts_disabled"

    def test_charges_disabled(self):
        assert _stage(details_submitted=True, payouts_enabled=True) == "charges_disabled"

    def test_details_needed(self):
        assert _stage(currently_due=["external_account"]) == "details_needed"

    def test_incomplete(self):
        assert _stage() == "incomplete"


class TestSummarizeAccount:
    def test_ready_account(self):
        summary = summarize_account(READY_ACCOUNT)
        assert summary["status"] == "complete"
        assert summary["verification_stage"] == "complete"
        assert summary["account_id"] == "acct_ready"

    def test_submitted_but_not_enabled_is_pending(self):
        account = {**UNFINISHED_ACCOUNT, "details_submitted": True}
        assert summarize_account(account)["status"] == "pending"

    def test_unfinished_account(self):
        summary = summarize_account(UNFINISHED_ACCOUNT)
        assert summary["status"] == "incomplete"
        assert summary["verification_stage"] == "details_needed"
        assert summary["requirements"]["currently_due"] == ["external_account"]
        assert summary["requirements"]["pending_verification"] == []


@pytest.fixture
def service(db):
    svc = StripeConnectService(db)
    svc.stripe_configured = True
    return svc


class TestOnboardingUrls:
    def test_plain(self):
        with patch("localcooks.services.stripe_connect_service.settings") as mock_settings:
            mock_settings.frontend_url = "https://app.localcook.shop"
            urls = StripeConnectService.build_onboarding_urls("manager")
        assert urls == {
            "refresh_url": "https://app.localcook.shop/manager/stripe-connect/refresh?role=manager",
            "return_url": (
                "https://app.localcook.shop/manager/stripe-connect/return?success=true&role=manager"
            ),
        }

    def test_from_setup(self):
        with patch("localcooks.services.stripe_connect_service.settings") as mock_settings:
            mock_settings.frontend_url = "https://app.localcook.shop"
            urls = StripeConnectService.build_onboarding_urls("chef", from_setup=True)
        assert urls["refresh_url"].endswith("/chef/stripe-connect/refresh?role=chef&from=setup")
        assert urls["return_url"].endswith(
            "/chef/stripe-connect/return?success=true&role=chef&from=setup"
        )


class TestCreateOrResume:
    def test_requires_configuration(self, db, manager):
        svc = StripeConnectService(db)
        svc.stripe_configured = False
        with pytest.raises(ServiceException) as exc:
            svc.create_or_resume(manager, "manager")
        assert exc.value.message == "Stripe is not configured"

    def test_creates_express_account(self, service, manager):
        with patch.object(stripe.Account, "create", return_value={"id": "acct_new"}) as create, \
                patch.object(stripe.AccountLink, "create", return_value={"url": "https://connect/x"}) as link:
            result = service.create_or_resume(manager, "manager", from_setup=True)

        assert result == {"account_id": "acct_new", "url": "https://connect/x"}
        kwargs = create.call_args.kwargs
        assert kwargs["type"] == "express"
        assert kwargs["country"] == "CA"
        assert kwargs["capabilities"] == {
            "card_payments": {"requested": True},
            "transfers": {"requested": True},
        }
        assert kwargs["metadata"] == {
            "user_id": manager.id,
            "role": "manager",
            "platform": "localcooks",
        }
        assert link.call_args.kwargs["type"] == "account_onboarding"
        assert link.call_args.kwargs["return_url"].endswith("&from=setup")
        assert manager.stripe_connect_account_id == "acct_new"
        assert manager.stripe_connect_onboarding_status == "in_progress"

    def test_ready_account_already_exists(self, service, make_user):
        user = make_user(role="manager", stripe_connect_account_id="acct_ready")
        with patch.object(stripe.Account, "retrieve", return_value=READY_ACCOUNT), \
                patch.object(stripe.Account, "create") as create:
            result = service.create_or_resume(user, "manager")
        assert result == {"already_exists": True, "account_id": "acct_ready"}
        create.assert_not_called()

    def test_unfinished_account_resumes_onboarding(self, service, make_user):
        user = make_user(role="chef", stripe_connect_account_id="acct_unfinished")
        with patch.object(stripe.Account, "retrieve", return_value=UNFINISHED_ACCOUNT), \
                patch.object(stripe.AccountLink, "create", return_value={"url": "https://connect/y"}):
            result = service.create_or_resume(user, "chef")
        assert result["url"] == "https://connect/y"

    def test_stripe_error_becomes_service_exception(self, service, manager):
        with patch.object(stripe.Account, "create", side_effect=stripe.StripeError("boom")):
            with pytest.raises(ServiceException):
                service.create_or_resume(manager, "manager")


class TestLinks:
    def test_onboarding_link_without_account(self, service, manager):
        with pytest.raises(StripeConnectAccountMissing) as exc:
            service.get_onboarding_link(manager, "manager")
        assert exc.value.message == "No Stripe Connect account found"
        assert exc.value.status_code == 400

    def test_dashboard_link_when_ready(self, service, make_user):
        user = make_user(role="manager", stripe_connect_account_id="acct_ready")
        with patch.object(stripe.Account, "retrieve", return_value=READY_ACCOUNT), \
                patch.object(
                    stripe.Account, "create_login_link", return_value={"url": "https://express/login"}
                ) as login:
            result = service.get_dashboard_link(user, "manager")
        assert result == {"url": "https://express/login"}
        login.assert_called_once_with("acct_ready")

    def test_dashboard_link_requires_onboarding(self, service, make_user):
        user = make_user(role="manager", stripe_connect_account_id="acct_unfinished")
        with patch.object(stripe.Account, "retrieve", return_value=UNFINISHED_ACCOUNT), \
                patch.object(stripe.AccountLink, "create", return_value={"url": "https://connect/z"}):
            result = service.get_dashboard_link(user, "manager")
        assert result == {"url": "https://connect/z", "requires_onboarding": True}


class TestStatusAndSync:
    def test_no_account(self, service, chef):
        status = service.get_status(chef)
        assert status["connected"] is False
        assert status["has_account"] is False
        assert status["status"] == "not_started"

    def test_status_syncs_stored_value(self, service, make_user):
        user = make_user(role="manager", stripe_connect_account_id="acct_ready")
        with patch.object(stripe.Account, "retrieve", return_value=READY_ACCOUNT):
            status = service.get_status(user)
        assert status["verification_stage"] == "complete"
        assert user.stripe_connect_onboarding_status == "complete"

    def test_status_falls_back_when_stripe_fails(self, service, make_user):
        user = make_user(
            role="manager",
            stripe_connect_account_id="acct_flaky",
            stripe_connect_onboarding_status="in_progress",
        )
        with patch.object(stripe.Account, "retrieve", side_effect=stripe.StripeError("down")):
            status = service.get_status(user)
        assert status == {
            "connected": True,
            "has_account": True,
            "account_id": "acct_flaky",
            "status": "in_progress",
            "verification_stage": "unknown",
        }

    def test_sync_uses_details_submitted(self, service, make_user):
        user = make_user(role="chef", stripe_connect_account_id="acct_unfinished")
        account = {**UNFINISHED_ACCOUNT, "details_submitted": True}
        with patch.object(stripe.Account, "retrieve", return_value=account):
            result = service.sync(user)
        assert result["onboarding_status"] == "complete"
        assert result["status"]["status"] == "pending"
        assert user.stripe_connect_onboarding_status == "complete"

    def test_sync_without_account(self, service, chef):
        with pytest.raises(StripeConnectAccountMissing):
            service.sync(chef)


def sign_payload(payload: bytes, secret: str) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhook deliveries."""
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode()}".encode()
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


class TestWebhooks:
    def test_construct_event_tries_every_secret(self, service):
        payload = b'{"type": "account.updated"}'
        with patch("localcooks.services.stripe_connect_service.settings") as mock_settings, \
                patch.object(
                    stripe.Webhook,
                    "construct_event",
                    side_effect=[stripe.SignatureVerificationError("bad", "sig"), None],
                ) as construct:
            mock_settings.webhook_secrets = ["whsec_cli", "whsec_connect"]
            assert service.construct_event(payload, "sig") == {"type": "account.updated"}
        assert [c.args[2] for c in construct.call_args_list] == ["whsec_cli", "whsec_connect"]

    def test_construct_event_rejects_bad_signature(self, service):
        with patch("localcooks.services.stripe_connect_service.settings") as mock_settings, \
                patch.object(
                    stripe.Webhook,
                    "construct_event",
                    side_effect=stripe.SignatureVerificationError("bad", "sig"),
                ):
            mock_settings.webhook_secrets = ["whsec_cli"]
            with pytest.raises(ValueError):
                service.construct_event(b"{}", "sig")

    def test_signed_account_update_syncs_user(self, service, make_user):
        user = make_user(role="manager", stripe_connect_account_id="acct_ready")
        payload = json.dumps(
            {"id": "evt_1", "type": "account.updated", "data": {"object": READY_ACCOUNT}}
        ).encode()
        with patch("localcooks.services.stripe_connect_service.settings") as mock_settings:
            mock_settings.webhook_secrets = ["whsec_test"]
            event = service.construct_event(payload, sign_payload(payload, "whsec_test"))
        assert isinstance(event, dict)
        assert service.handle_webhook_event(event) is True
        assert user.stripe_connect_onboarding_status == "complete"

    def test_construct_event_without_secrets(self, service):
        with patch("localcooks.services.stripe_connect_service.settings") as mock_settings:
            mock_settings.webhook_secrets = []
            with pytest.raises(ServiceException):
                service.construct_event(b"{}", "sig")

    def test_account_updated_syncs_user(self, service, make_user):
        user = make_user(role="manager", stripe_connect_account_id="acct_ready")
        handled = service.handle_webhook_event(
            {"type": "account.updated", "data": {"object": READY_ACCOUNT}}
        )
        assert handled is True
        assert user.stripe_connect_onboarding_status == "complete"

    def test_unknown_account_is_ignored(self, service):
        handled = service.handle_webhook_event(
            {"type": "account.updated", "data": {"object": {"id": "acct_nobody"}}}
        )
        assert handled is False

    def test_other_events_are_acknowledged(self, service):
        assert service.handle_webhook_event({"type": "payment_intent.succeeded"}) is False
