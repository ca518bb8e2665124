"""User and role-selection schemas."""

from typing import Any, List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class UpdateRolesRequest(StrictRequestModel):
    """Role toggles from the role-selection screen.

    ``is_chef`` is typed loosely so the service can reject non-boolean values
    with a business error instead of a schema error.
    """

    is_chef: Any = Field(default=None, description="Whether the user cooks on the platform")
    is_delivery_partner: Any = Field(default=False, description="Whether the user delivers")


class UserResponse(StrictModel):
    id: str
    username: str
    role: Optional[str] = None
    firebase_uid: Optional[str] = None
    is_chef: bool = False
    is_delivery_partner: bool = False
    is_manager: bool = False
    is_verified: bool = False
    has_seen_welcome: bool = False


class UserProfileResponse(UserResponse):
    display_name: Optional[str] = None
    stripe_connect_account_id: Optional[str] = None
    stripe_connect_onboarding_status: str = "not_started"
    manager_onboarding_completed: bool = False
    manager_onboarding_skipped: bool = False
    manager_onboarding_steps_completed: List[Any] = Field(default_factory=list)
    has_approved_application: bool = False


class SuccessResponse(StrictModel):
    success: bool = True
    message: Optional[str] = None
