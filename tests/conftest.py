"""
Shared fixtures for the LocalCooks backend tests.

Each test gets a fresh in-memory SQLite database. Route tests talk to the
real app through TestClient with two dependency overrides: the DB session
and the Firebase verifier. The fake verifier treats the bearer token as the
Firebase UID, so tests authenticate with ``{"Authorization": "Bearer <uid>"}``.
"""

from datetime import date, datetime, timedelta, timezone
import os
from typing import Any, Dict, Iterator, Optional

# Must be set before localcooks.core.config is imported
os.environ.setdefault("CI", "1")
os.environ["EMAIL_ENABLED"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("STRIPE_SECRET_KEY", None)

from fastapi import Depends, HTTPException, status  # noqa: E402
from fastapi.security import HTTPAuthorizationCredentials  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from localcooks import models  # noqa: E402,F401
from localcooks.api.dependencies.auth import bearer_scheme, get_firebase_claims  # noqa: E402
from localcooks.api.dependencies.database import get_db  # noqa: E402
from localcooks.database import Base  # noqa: E402
from localcooks.main import app  # noqa: E402
from localcooks.models.location import Kitchen, Location, StorageListing  # noqa: E402
from localcooks.models.storage_booking import (  # noqa: E402
    CheckoutStatus,
    StorageBooking,
    StorageBookingStatus,
)
from localcooks.models.user import User  # noqa: E402


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Iterator[Session]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ========== Factories ==========


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(
        role: Optional[str] = None,
        firebase_uid: Optional[str] = None,
        username: Optional[str] = None,
        **fields: Any,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            username=username or f"user{n}@example.com",
            firebase_uid=firebase_uid or f"firebase-uid-{n}",
            role=role,
            is_chef=fields.pop("is_chef", role == "chef"),
            is_manager=fields.pop("is_manager", role == "manager"),
            **fields,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def chef(make_user) -> User:
    return make_user(role="chef", firebase_uid="chef-uid", username="chef@example.com")


@pytest.fixture
def manager(make_user) -> User:
    return make_user(role="manager", firebase_uid="manager-uid", username="manager@example.com")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(role="admin", firebase_uid="admin-uid", username="admin@example.com")


@pytest.fixture
def make_location(db):
    def _make(manager: Optional[User], **fields: Any) -> Location:
        location = Location(
            name=fields.pop("name", "Harbour Kitchen"),
            address=fields.pop("address", "12 Water St, St. John's"),
            manager_id=manager.id if manager else None,
            **fields,
        )
        db.add(location)
        db.commit()
        return location

    return _make


@pytest.fixture
def make_storage_booking(db, make_location):
    """Booking with its listing -> kitchen -> location chain."""

    def _make(
        chef: Optional[User],
        manager: Optional[User],
        location: Optional[Location] = None,
        **fields: Any,
    ) -> StorageBooking:
        location = location or make_location(manager)
        kitchen = Kitchen(location_id=location.id, name="Main Kitchen")
        db.add(kitchen)
        db.flush()
        listing = StorageListing(kitchen_id=kitchen.id, name="Walk-in Cooler", storage_type="cold")
        db.add(listing)
        db.flush()
        today = date.today()
        booking = StorageBooking(
            storage_listing_id=listing.id,
            chef_id=chef.id if chef else None,
            start_date=fields.pop("start_date", today - timedelta(days=7)),
            end_date=fields.pop("end_date", today + timedelta(days=3)),
            status=fields.pop("status", StorageBookingStatus.CONFIRMED),
            checkout_status=fields.pop("checkout_status", CheckoutStatus.ACTIVE),
            **fields,
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def requested_booking(make_storage_booking, chef, manager) -> StorageBooking:
    return make_storage_booking(
        chef,
        manager,
        checkout_status=CheckoutStatus.CHECKOUT_REQUESTED,
        checkout_requested_at=datetime.now(timezone.utc) - timedelta(minutes=30),
        checkout_notes="Emptied and wiped down",
        checkout_photo_urls=["https://cdn.example.com/p1.jpg"],
    )


# ========== App client ==========


def _fake_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Stand-in for Firebase verification: the bearer token is the UID."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="No auth token provided"
        )
    uid = credentials.credentials
    return {"uid": uid, "email": f"{uid}@example.com", "email_verified": True}


@pytest.fixture
def client(db) -> Iterator[TestClient]:
    def _override_get_db() -> Iterator[Session]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_firebase_claims] = _fake_claims
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {user.firebase_uid}"}

    return _headers
