# localcooks/services/user_service.py
"""
User registration and role selection.

Local users are created explicitly by the registration call after Firebase
sign-up; signing in with an unknown UID never creates a row.
"""

from typing import Any, Dict

from sqlalchemy.orm import Session

from ..core.constants import ROLE_ADMIN, ROLE_CHEF, ROLE_DELIVERY_PARTNER, ROLE_MANAGER
from ..core.exceptions import ConflictException, ValidationException
from ..models.user import User
from ..repositories.application_repository import ApplicationRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService


class UserService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = UserRepository(db)
        self.application_repository = ApplicationRepository(db)

    @BaseService.measure_operation("register_user")
    def register_from_claims(self, claims: Dict[str, Any]) -> User:
        """Create the local user for a verified Firebase token, or return the existing one."""
        firebase_uid = claims.get("uid") or claims.get("user_id")
        if not firebase_uid:
            raise ValidationException("Token has no uid", code="invalid_token")

        existing = self.user_repository.get_by_firebase_uid(firebase_uid)
        if existing:
            return existing

        email = (claims.get("email") or "").strip().lower()
        if not email:
            raise ValidationException("An email address is required to register")
        if self.user_repository.get_by_username(email):
            raise ConflictException(
                "An account with this email already exists", code="email_taken"
            )

        with self.transaction():
            user = self.user_repository.create(
                username=email,
                firebase_uid=firebase_uid,
                display_name=claims.get("name"),
                is_verified=bool(claims.get("email_verified", False)),
            )
        self.logger.info(f"Registered user {user.id} for firebase uid {firebase_uid}")
        return user

    @BaseService.measure_operation("update_roles")
    def update_roles(self, user: User, is_chef: Any, is_delivery_partner: Any = False) -> User:
        """
        Apply the role-selection toggles.

        Both toggles may be on; at least one must be. Admin and manager
        accounts keep their primary role and only gain the flags.
        """
        if not isinstance(is_chef, bool):
            raise ValidationException("isChef must be a boolean", code="invalid_role_selection")
        if is_delivery_partner is None:
            is_delivery_partner = False
        if not isinstance(is_delivery_partner, bool):
            raise ValidationException(
                "isDeliveryPartner must be a boolean", code="invalid_role_selection"
            )
        if not is_chef and not is_delivery_partner:
            raise ValidationException(
                "Please select at least one role", code="invalid_role_selection"
            )

        with self.transaction():
            user.is_chef = is_chef
            user.is_delivery_partner = is_delivery_partner
            if user.role not in (ROLE_ADMIN, ROLE_MANAGER):
                user.role = ROLE_CHEF if is_chef else ROLE_DELIVERY_PARTNER
        self.logger.info(
            f"Updated roles for user {user.id}: chef={is_chef} delivery={is_delivery_partner}"
        )
        return user

    def mark_welcome_seen(self, user: User) -> User:
        with self.transaction():
            user.has_seen_welcome = True
        return user

    def get_profile(self, user: User) -> Dict[str, Any]:
        profile = user.to_dict()
        profile.update(
            display_name=user.display_name,
            stripe_connect_account_id=user.stripe_connect_account_id,
            stripe_connect_onboarding_status=user.stripe_connect_onboarding_status,
            manager_onboarding_completed=bool(user.manager_onboarding_completed),
            manager_onboarding_skipped=bool(user.manager_onboarding_skipped),
            manager_onboarding_steps_completed=list(user.manager_onboarding_steps_completed or []),
            has_approved_application=self.application_repository.has_approved(user.id),
        )
        return profile
