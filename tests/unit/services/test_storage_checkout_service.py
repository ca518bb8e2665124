"""
Unit tests for StorageCheckoutService.

Covers the chef request rules, the manager clear/claim decisions, the
deprecated deny alias and the review-window arithmetic.
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from localcooks.core.exceptions import (
    CheckoutStateException,
    NotFoundException,
    ValidationException,
)
from localcooks.core.timezone_utils import ensure_utc
from localcooks.models.storage_booking import (
    CheckoutStatus,
    DamageClaim,
    StorageBookingStatus,
)
from localcooks.repositories.platform_setting_repository import PlatformSettingRepository
from localcooks.services.storage_checkout_service import (
    ACTION_CLEAR,
    ACTION_DENY,
    ACTION_START_CLAIM,
    CLEAR_MESSAGE,
    DENY_DEPRECATED_MESSAGE,
    StorageCheckoutService,
    _days_until,
)

VALID_CLAIM = {
    "claim_title": "Broken shelf",
    "claim_description": "The middle shelf of the walk-in cooler was cracked and needs replacing.",
    "claimed_amount_cents": 12500,
}


@pytest.fixture
def notifications():
    return MagicMock()


@pytest.fixture
def service(db, notifications):
    return StorageCheckoutService(db, notification_service=notifications)


class TestRequestCheckout:
    def test_happy_path(self, service, notifications, make_storage_booking, chef, manager):
        booking = make_storage_booking(
            chef,
            manager,
            checkout_denial_reason="Old denial",
            checkout_denied_at=datetime.now(timezone.utc),
        )
        result = service.request_checkout(
            booking.id, chef, "All cleared out", ["https://cdn.example.com/a.jpg", ""]
        )

        assert result["success"] is True
        assert result["checkout_status"] == CheckoutStatus.CHECKOUT_REQUESTED
        assert booking.checkout_requested_at is not None
        assert booking.checkout_notes == "All cleared out"
        assert booking.checkout_photo_urls == ["https://cdn.example.com/a.jpg"]
        assert booking.checkout_denial_reason is None
        assert booking.checkout_denied_at is None
        notifications.send_checkout_requested.assert_called_once_with(booking, 2)

    def test_unknown_booking(self, service, chef):
        with pytest.raises(ValidationException) as exc:
            service.request_checkout("01HZZZZZZZZZZZZZZZZZZZZZZZ", chef)
        assert exc.value.message == "Storage booking not found"

    def test_other_chef(self, service, make_storage_booking, make_user, chef, manager):
        booking = make_storage_booking(chef, manager)
        intruder = make_user(role="chef")
        with pytest.raises(ValidationException) as exc:
            service.request_checkout(booking.id, intruder)
        assert exc.value.message == "You do not have permission to checkout this storage booking"

    def test_cancelled_booking(self, service, make_storage_booking, chef, manager):
        booking = make_storage_booking(chef, manager, status=StorageBookingStatus.CANCELLED)
        with pytest.raises(ValidationException) as exc:
            service.request_checkout(booking.id, chef)
        assert exc.value.message == "Cannot checkout a cancelled booking"

    @pytest.mark.parametrize(
        "checkout_status,message",
        [
            (
                CheckoutStatus.CHECKOUT_REQUESTED,
                "Checkout has already been requested for this booking",
            ),
            (
                CheckoutStatus.CHECKOUT_APPROVED,
                "Checkout has already been approved for this booking",
            ),
            (CheckoutStatus.COMPLETED, "This booking has already been completed"),
            (CheckoutStatus.CHECKOUT_CLAIM_FILED, "This booking has already been completed"),
        ],
    )
    def test_repeat_requests(
        self, service, make_storage_booking, chef, manager, checkout_status, message
    ):
        booking = make_storage_booking(chef, manager, checkout_status=checkout_status)
        with pytest.raises(ValidationException) as exc:
            service.request_checkout(booking.id, chef)
        assert exc.value.message == message

    def test_too_many_photos(self, service, make_storage_booking, chef, manager):
        booking = make_storage_booking(chef, manager)
        photos = [f"https://cdn.example.com/{i}.jpg" for i in range(11)]
        with pytest.raises(ValidationException) as exc:
            service.request_checkout(booking.id, chef, None, photos)
        assert exc.value.message == "Maximum 10 checkout photos allowed"


class TestAddCheckoutPhotos:
    def test_appends_photos(self, service, requested_booking, chef):
        result = service.add_checkout_photos(
            requested_booking.id, chef, ["https://cdn.example.com/p2.jpg"]
        )
        assert result["message"] == "1 photo(s) added"
        assert requested_booking.checkout_photo_urls == [
            "https://cdn.example.com/p1.jpg",
            "https://cdn.example.com/p2.jpg",
        ]

    def test_only_while_requested(self, service, make_storage_booking, chef, manager):
        booking = make_storage_booking(chef, manager)
        with pytest.raises(ValidationException) as exc:
            service.add_checkout_photos(booking.id, chef, ["https://cdn.example.com/x.jpg"])
        assert exc.value.message == "Can only add photos to pending checkout requests"

    def test_total_is_capped(self, service, requested_booking, chef):
        photos = [f"https://cdn.example.com/{i}.jpg" for i in range(10)]
        with pytest.raises(ValidationException):
            service.add_checkout_photos(requested_booking.id, chef, photos)


class TestCheckoutStatus:
    def test_review_windows(self, service, requested_booking, chef):
        requested_at = ensure_utc(requested_booking.checkout_requested_at)
        now = requested_at + timedelta(hours=3)

        status = service.get_checkout_status(requested_booking.id, chef, now=now)

        assert status["checkout_status"] == CheckoutStatus.CHECKOUT_REQUESTED
        assert status["review_deadline"] == requested_at + timedelta(hours=2)
        assert status["is_review_expired"] is True
        assert status["extended_claim_deadline"] == requested_at + timedelta(hours=48)
        assert status["can_file_extended_claim"] is True

    def test_extended_window_closes(self, service, requested_booking, chef):
        now = ensure_utc(requested_booking.checkout_requested_at) + timedelta(hours=49)
        status = service.get_checkout_status(requested_booking.id, chef, now=now)
        assert status["can_file_extended_claim"] is False

    def test_windows_follow_platform_settings(self, service, db, requested_booking, chef):
        PlatformSettingRepository(db).upsert("storage_checkout_review_window_hours", "6")
        db.commit()
        now = ensure_utc(requested_booking.checkout_requested_at) + timedelta(hours=3)
        status = service.get_checkout_status(requested_booking.id, chef, now=now)
        assert status["is_review_expired"] is False

    def test_not_requested_has_no_deadlines(self, service, make_storage_booking, chef, manager):
        booking = make_storage_booking(chef, manager)
        status = service.get_checkout_status(booking.id, chef)
        assert status["checkout_status"] == CheckoutStatus.ACTIVE
        assert status["review_deadline"] is None
        assert status["can_file_extended_claim"] is False

    def test_manager_of_location_can_read(self, service, requested_booking, manager):
        status = service.get_checkout_status(requested_booking.id, manager)
        assert status["storage_booking_id"] == requested_booking.id

    def test_stranger_cannot_read(self, service, requested_booking, make_user):
        with pytest.raises(ValidationException):
            service.get_checkout_status(requested_booking.id, make_user(role="chef"))

    def test_missing_booking(self, service, chef):
        with pytest.raises(NotFoundException):
            service.get_checkout_status("01HZZZZZZZZZZZZZZZZZZZZZZZ", chef)


class TestManagerLists:
    def test_pending_is_scoped_and_computes_days(
        self, service, make_storage_booking, make_user, chef, manager
    ):
        now = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)
        mine = make_storage_booking(
            chef,
            manager,
            end_date=date(2026, 3, 8),
            checkout_status=CheckoutStatus.CHECKOUT_REQUESTED,
            checkout_requested_at=now - timedelta(hours=1),
        )
        make_storage_booking(
            chef,
            make_user(role="manager"),
            checkout_status=CheckoutStatus.CHECKOUT_REQUESTED,
            checkout_requested_at=now,
        )
        make_storage_booking(chef, manager)  # active, not pending

        items = service.list_pending_checkouts(manager, now=now)

        assert [item["storage_booking_id"] for item in items] == [mine.id]
        item = items[0]
        assert item["days_until_end"] == -2
        assert item["is_overdue"] is True
        assert item["is_review_expired"] is False
        assert item["chef_email"] == "chef@example.com"
        assert item["storage_type"] == "cold"

    def test_pending_newest_first(self, service, make_storage_booking, chef, manager):
        now = datetime.now(timezone.utc)
        older = make_storage_booking(
            chef,
            manager,
            checkout_status=CheckoutStatus.CHECKOUT_REQUESTED,
            checkout_requested_at=now - timedelta(hours=5),
        )
        newer = make_storage_booking(
            chef,
            manager,
            checkout_status=CheckoutStatus.CHECKOUT_REQUESTED,
            checkout_requested_at=now - timedelta(hours=1),
        )
        ids = [item["storage_booking_id"] for item in service.list_pending_checkouts(manager)]
        assert ids == [newer.id, older.id]

    def test_history_lists_finished_checkouts(self, service, make_storage_booking, chef, manager):
        done = make_storage_booking(chef, manager, checkout_status=CheckoutStatus.COMPLETED)
        claimed = make_storage_booking(
            chef, manager, checkout_status=CheckoutStatus.CHECKOUT_CLAIM_FILED
        )
        make_storage_booking(chef, manager)

        history = service.list_checkout_history(manager, limit=20)
        assert {item["storage_booking_id"] for item in history} == {done.id, claimed.id}

    def test_manager_without_locations(self, service, make_user):
        loner = make_user(role="manager")
        assert service.list_pending_checkouts(loner) == []
        assert service.list_checkout_history(loner) == []


class TestProcessCheckout:
    def test_clear_completes_booking(self, service, notifications, requested_booking, manager):
        result = service.process_checkout(requested_booking.id, manager, ACTION_CLEAR, "Spotless")

        assert result == {
            "success": True,
            "message": CLEAR_MESSAGE,
            "storage_booking_id": requested_booking.id,
            "checkout_status": CheckoutStatus.COMPLETED,
        }
        assert requested_booking.status == StorageBookingStatus.COMPLETED
        assert requested_booking.checkout_approved_by == manager.id
        assert requested_booking.checkout_approved_at is not None
        notifications.send_checkout_cleared.assert_called_once_with(requested_booking, "Spotless")

    def test_deny_is_a_deprecated_clear(self, service, requested_booking, manager):
        result = service.process_checkout(requested_booking.id, manager, ACTION_DENY)
        assert result["deprecated"] is True
        assert result["message"] == DENY_DEPRECATED_MESSAGE
        assert result["checkout_status"] == CheckoutStatus.COMPLETED

    def test_admin_may_process_any_location(self, service, requested_booking, admin):
        result = service.process_checkout(requested_booking.id, admin, ACTION_CLEAR)
        assert result["checkout_status"] == CheckoutStatus.COMPLETED

    def test_foreign_manager(self, service, requested_booking, make_user):
        with pytest.raises(ValidationException) as exc:
            service.process_checkout(requested_booking.id, make_user(role="manager"), ACTION_CLEAR)
        assert exc.value.message == "You do not have permission to approve this checkout"

    def test_wrong_state(self, service, make_storage_booking, chef, manager):
        booking = make_storage_booking(chef, manager)
        with pytest.raises(CheckoutStateException) as exc:
            service.process_checkout(booking.id, manager, ACTION_CLEAR)
        assert exc.value.message == "Cannot process checkout in status: active"

    def test_unknown_action(self, service, requested_booking, manager):
        with pytest.raises(ValidationException):
            service.process_checkout(requested_booking.id, manager, "approve_with_fee")


class TestStartClaim:
    def test_files_claim(self, service, db, notifications, requested_booking, manager):
        before = datetime.now(timezone.utc)
        result = service.process_checkout(
            requested_booking.id, manager, ACTION_START_CLAIM, "Photos on file", dict(VALID_CLAIM)
        )

        assert result["checkout_status"] == CheckoutStatus.CHECKOUT_CLAIM_FILED
        claim = db.get(DamageClaim, result["damage_claim_id"])
        assert claim.claimed_amount_cents == 12500
        assert claim.claim_title == "Broken shelf"
        assert claim.manager_id == manager.id
        assert claim.chef_id == requested_booking.chef_id
        deadline = ensure_utc(claim.chef_response_deadline)
        assert before + timedelta(hours=72) <= deadline <= before + timedelta(hours=73)
        assert requested_booking.checkout_denial_reason == "Photos on file"
        notifications.send_claim_filed.assert_called_once()

    @pytest.mark.parametrize(
        "override,message",
        [
            ({"claim_title": " abc "}, "Claim title must be at least 5 characters"),
            ({"claim_description": "Too short"}, "Claim description must be at least 50 characters"),
            ({"claimed_amount_cents": 0}, "Claimed amount must be a positive number (in cents)"),
            ({"claimed_amount_cents": 12.5}, "Claimed amount must be a positive number (in cents)"),
            ({"claimed_amount_cents": True}, "Claimed amount must be a positive number (in cents)"),
        ],
    )
    def test_validation(self, service, requested_booking, manager, override, message):
        claim = {**VALID_CLAIM, **override}
        with pytest.raises(ValidationException) as exc:
            service.process_checkout(requested_booking.id, manager, ACTION_START_CLAIM, None, claim)
        assert exc.value.message == message

    @pytest.mark.parametrize("amount", [999, 500001])
    def test_amount_limits(self, service, requested_booking, manager, amount):
        claim = {**VALID_CLAIM, "claimed_amount_cents": amount}
        with pytest.raises(ValidationException) as exc:
            service.process_checkout(requested_booking.id, manager, ACTION_START_CLAIM, None, claim)
        assert exc.value.code == "claim_amount_out_of_range"

    def test_claim_count_limit(self, service, db, requested_booking, manager):
        for i in range(3):
            db.add(
                DamageClaim(
                    storage_booking_id=requested_booking.id,
                    manager_id=manager.id,
                    location_id=requested_booking.location.id,
                    claim_title=f"Earlier claim {i}",
                    claim_description="x" * 60,
                    claimed_amount_cents=2000,
                    chef_response_deadline=datetime.now(timezone.utc),
                )
            )
        db.commit()
        with pytest.raises(ValidationException) as exc:
            service.process_checkout(
                requested_booking.id, manager, ACTION_START_CLAIM, None, dict(VALID_CLAIM)
            )
        assert exc.value.code == "claim_limit_reached"


@pytest.mark.parametrize(
    "end,today,expected",
    [
        (date(2026, 3, 10), date(2026, 3, 10), 0),
        (date(2026, 3, 12), date(2026, 3, 10), 2),
        (date(2026, 3, 9), date(2026, 3, 10), -1),
    ],
)
def test_days_until(end, today, expected):
    assert _days_until(end, today) == expected
