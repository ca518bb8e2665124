"""
Stripe Connect schemas.

The status payload mirrors what Stripe reports for an Express account plus
the derived ``verification_stage`` used by the onboarding badge.
"""

from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel


class StripeRequirements(StrictModel):
    currently_due: List[str] = Field(default_factory=list)
    past_due: List[str] = Field(default_factory=list)
    pending_verification: List[str] = Field(default_factory=list)
    current_deadline: Optional[int] = Field(
        default=None, description="Unix timestamp of the next requirement deadline"
    )


class StripeConnectStatusResponse(StrictModel):
    connected: bool
    has_account: bool
    account_id: Optional[str] = None
    payouts_enabled: bool = False
    charges_enabled: bool = False
    details_submitted: bool = False
    status: str
    verification_stage: Optional[str] = None
    disabled_reason: Optional[str] = None
    requirements: Optional[StripeRequirements] = None


class StripeConnectCreateResponse(StrictModel):
    already_exists: Optional[bool] = None
    account_id: Optional[str] = None
    url: Optional[str] = None


class StripeConnectLinkResponse(StrictModel):
    url: str
    requires_onboarding: Optional[bool] = None


class StripeConnectSyncResponse(StrictModel):
    success: bool = True
    onboarding_status: str
    status: StripeConnectStatusResponse
