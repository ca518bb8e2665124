# localcooks/routes/v1/storage_checkouts.py
"""
Storage checkout routes - API v1

Mounted under /api/v1. Chef endpoints start the checkout; manager endpoints
review it; admins tune the review windows.

Endpoints:
    POST /chef/storage-bookings/{id}/request-checkout
    POST /chef/storage-bookings/{id}/checkout-photos
    GET  /chef/storage-bookings/{id}/checkout-status
    GET  /manager/storage-checkouts/pending
    GET  /manager/storage-checkouts/history
    POST /manager/storage-bookings/{id}/clear-checkout
    POST /manager/storage-bookings/{id}/approve-checkout   (alias of clear)
    POST /manager/storage-bookings/{id}/start-claim
    POST /manager/storage-bookings/{id}/deny-checkout      (deprecated, clears)
    GET/PUT /admin/storage-checkout-settings
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from ...api.dependencies.auth import require_admin, require_chef, require_manager
from ...api.dependencies.services import (
    get_platform_settings_service,
    get_storage_checkout_service,
)
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.storage_checkout import (
    CheckoutActionResponse,
    CheckoutHistoryItem,
    CheckoutHistoryResponse,
    CheckoutPhotosRequest,
    CheckoutRequest,
    CheckoutStatusResponse,
    ClearCheckoutRequest,
    PendingCheckoutItem,
    PendingCheckoutsResponse,
    StartClaimRequest,
    StorageCheckoutSettingsResponse,
    StorageCheckoutSettingsUpdate,
)
from ...services.platform_settings_service import PlatformSettingsService
from ...services.storage_checkout_service import (
    ACTION_CLEAR,
    ACTION_DENY,
    ACTION_START_CLAIM,
    StorageCheckoutService,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["storage-checkout-v1"])


# ========== Chef ==========


@router.post(
    "/chef/storage-bookings/{booking_id}/request-checkout",
    response_model=CheckoutActionResponse,
    response_model_exclude_none=True,
)
async def request_checkout(
    booking_id: str,
    payload: Optional[CheckoutRequest] = Body(default=None),
    current_user: User = Depends(require_chef),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutActionResponse:
    payload = payload or CheckoutRequest()
    try:
        result = await asyncio.to_thread(
            checkout_service.request_checkout,
            booking_id,
            current_user,
            payload.checkout_notes,
            payload.checkout_photo_urls,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CheckoutActionResponse(**result)


@router.post(
    "/chef/storage-bookings/{booking_id}/checkout-photos",
    response_model=CheckoutActionResponse,
    response_model_exclude_none=True,
)
async def add_checkout_photos(
    booking_id: str,
    payload: CheckoutPhotosRequest,
    current_user: User = Depends(require_chef),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutActionResponse:
    try:
        result = await asyncio.to_thread(
            checkout_service.add_checkout_photos, booking_id, current_user, payload.photo_urls
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CheckoutActionResponse(**result)


@router.get(
    "/chef/storage-bookings/{booking_id}/checkout-status", response_model=CheckoutStatusResponse
)
async def get_checkout_status(
    booking_id: str,
    current_user: User = Depends(require_chef),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutStatusResponse:
    try:
        result = await asyncio.to_thread(
            checkout_service.get_checkout_status, booking_id, current_user
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CheckoutStatusResponse(**result)


# ========== Manager ==========


@router.get("/manager/storage-checkouts/pending", response_model=PendingCheckoutsResponse)
async def list_pending_checkouts(
    current_user: User = Depends(require_manager),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> PendingCheckoutsResponse:
    items = await asyncio.to_thread(checkout_service.list_pending_checkouts, current_user)
    return PendingCheckoutsResponse(
        pending_checkouts=[PendingCheckoutItem(**item) for item in items]
    )


@router.get("/manager/storage-checkouts/history", response_model=CheckoutHistoryResponse)
async def list_checkout_history(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_manager),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutHistoryResponse:
    items = await asyncio.to_thread(checkout_service.list_checkout_history, current_user, limit)
    return CheckoutHistoryResponse(checkout_history=[CheckoutHistoryItem(**item) for item in items])


async def _clear(
    booking_id: str,
    action: str,
    payload: Optional[ClearCheckoutRequest],
    current_user: User,
    checkout_service: StorageCheckoutService,
) -> CheckoutActionResponse:
    notes = payload.manager_notes if payload else None
    try:
        result = await asyncio.to_thread(
            checkout_service.process_checkout, booking_id, current_user, action, notes
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CheckoutActionResponse(**result)


@router.post(
    "/manager/storage-bookings/{booking_id}/clear-checkout",
    response_model=CheckoutActionResponse,
    response_model_exclude_none=True,
)
async def clear_checkout(
    booking_id: str,
    payload: Optional[ClearCheckoutRequest] = Body(default=None),
    current_user: User = Depends(require_manager),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutActionResponse:
    return await _clear(booking_id, ACTION_CLEAR, payload, current_user, checkout_service)


@router.post(
    "/manager/storage-bookings/{booking_id}/approve-checkout",
    response_model=CheckoutActionResponse,
    response_model_exclude_none=True,
)
async def approve_checkout(
    booking_id: str,
    payload: Optional[ClearCheckoutRequest] = Body(default=None),
    current_user: User = Depends(require_manager),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutActionResponse:
    return await _clear(booking_id, ACTION_CLEAR, payload, current_user, checkout_service)


@router.post(
    "/manager/storage-bookings/{booking_id}/deny-checkout",
    response_model=CheckoutActionResponse,
    response_model_exclude_none=True,
    deprecated=True,
)
async def deny_checkout(
    booking_id: str,
    payload: Optional[ClearCheckoutRequest] = Body(default=None),
    current_user: User = Depends(require_manager),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutActionResponse:
    return await _clear(booking_id, ACTION_DENY, payload, current_user, checkout_service)


@router.post(
    "/manager/storage-bookings/{booking_id}/start-claim",
    response_model=CheckoutActionResponse,
    response_model_exclude_none=True,
)
async def start_claim(
    booking_id: str,
    payload: StartClaimRequest,
    current_user: User = Depends(require_manager),
    checkout_service: StorageCheckoutService = Depends(get_storage_checkout_service),
) -> CheckoutActionResponse:
    try:
        result = await asyncio.to_thread(
            checkout_service.process_checkout,
            booking_id,
            current_user,
            ACTION_START_CLAIM,
            payload.manager_notes,
            payload.model_dump(exclude={"manager_notes"}),
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CheckoutActionResponse(**result)


# ========== Admin ==========


@router.get("/admin/storage-checkout-settings", response_model=StorageCheckoutSettingsResponse)
async def get_storage_checkout_settings(
    current_user: User = Depends(require_admin),
    settings_service: PlatformSettingsService = Depends(get_platform_settings_service),
) -> StorageCheckoutSettingsResponse:
    current = await asyncio.to_thread(settings_service.get_storage_checkout_settings)
    return StorageCheckoutSettingsResponse(
        review_window_hours=current.review_window_hours,
        extended_claim_window_hours=current.extended_claim_window_hours,
    )


@router.put("/admin/storage-checkout-settings", response_model=StorageCheckoutSettingsResponse)
async def update_storage_checkout_settings(
    payload: StorageCheckoutSettingsUpdate,
    current_user: User = Depends(require_admin),
    settings_service: PlatformSettingsService = Depends(get_platform_settings_service),
) -> StorageCheckoutSettingsResponse:
    try:
        updated = await asyncio.to_thread(
            settings_service.update_storage_checkout_settings,
            current_user,
            payload.review_window_hours,
            payload.extended_claim_window_hours,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return StorageCheckoutSettingsResponse(
        review_window_hours=updated.review_window_hours,
        extended_claim_window_hours=updated.extended_claim_window_hours,
    )


__all__ = ["router"]
