# localcooks/routes/v1/stripe_connect.py
"""
Stripe Connect routes - API v1

Managers and chefs share the same onboarding flow; each role gets its own
router so the role-specific return URLs and guards stay explicit.

Endpoints (under /manager/stripe-connect and /chef/stripe-connect):
    POST /create            → Create or resume an Express account
    GET /onboarding-link    → Fresh onboarding link (?from=setup)
    GET /dashboard-link     → Express dashboard login link
    GET /status             → Account status and verification stage
    POST /sync              → Re-read the account and persist the status
"""

import asyncio
import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import require_chef, require_manager
from ...api.dependencies.services import get_stripe_connect_service
from ...core.constants import ROLE_CHEF, ROLE_MANAGER
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.stripe_connect import (
    StripeConnectCreateResponse,
    StripeConnectLinkResponse,
    StripeConnectStatusResponse,
    StripeConnectSyncResponse,
)
from ...services.stripe_connect_service import StripeConnectService

logger = logging.getLogger(__name__)


def _build_router(role: str, guard: Callable[..., User]) -> APIRouter:
    router = APIRouter(tags=[f"{role}-stripe-connect-v1"])

    @router.post(
        "/create",
        response_model=StripeConnectCreateResponse,
        response_model_exclude_none=True,
    )
    async def create_account(
        from_: Optional[str] = Query(default=None, alias="from"),
        current_user: User = Depends(guard),
        stripe_service: StripeConnectService = Depends(get_stripe_connect_service),
    ) -> StripeConnectCreateResponse:
        try:
            result = await asyncio.to_thread(
                stripe_service.create_or_resume, current_user, role, from_ == "setup"
            )
        except DomainException as e:
            raise e.to_http_exception()
        return StripeConnectCreateResponse(**result)

    @router.get(
        "/onboarding-link",
        response_model=StripeConnectLinkResponse,
        response_model_exclude_none=True,
    )
    async def onboarding_link(
        from_: Optional[str] = Query(default=None, alias="from"),
        current_user: User = Depends(guard),
        stripe_service: StripeConnectService = Depends(get_stripe_connect_service),
    ) -> StripeConnectLinkResponse:
        try:
            result = await asyncio.to_thread(
                stripe_service.get_onboarding_link, current_user, role, from_ == "setup"
            )
        except DomainException as e:
            raise e.to_http_exception()
        return StripeConnectLinkResponse(**result)

    @router.get(
        "/dashboard-link",
        response_model=StripeConnectLinkResponse,
        response_model_exclude_none=True,
    )
    async def dashboard_link(
        current_user: User = Depends(guard),
        stripe_service: StripeConnectService = Depends(get_stripe_connect_service),
    ) -> StripeConnectLinkResponse:
        try:
            result = await asyncio.to_thread(stripe_service.get_dashboard_link, current_user, role)
        except DomainException as e:
            raise e.to_http_exception()
        return StripeConnectLinkResponse(**result)

    @router.get("/status", response_model=StripeConnectStatusResponse)
    async def account_status(
        current_user: User = Depends(guard),
        stripe_service: StripeConnectService = Depends(get_stripe_connect_service),
    ) -> StripeConnectStatusResponse:
        try:
            result = await asyncio.to_thread(stripe_service.get_status, current_user)
        except DomainException as e:
            raise e.to_http_exception()
        return StripeConnectStatusResponse(**result)

    @router.post("/sync", response_model=StripeConnectSyncResponse)
    async def sync_account(
        current_user: User = Depends(guard),
        stripe_service: StripeConnectService = Depends(get_stripe_connect_service),
    ) -> StripeConnectSyncResponse:
        try:
            result = await asyncio.to_thread(stripe_service.sync, current_user)
        except DomainException as e:
            raise e.to_http_exception()
        return StripeConnectSyncResponse(**result)

    return router


manager_router = _build_router(ROLE_MANAGER, require_manager)
chef_router = _build_router(ROLE_CHEF, require_chef)

__all__ = ["manager_router", "chef_router"]
