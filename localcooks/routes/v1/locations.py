# localcooks/routes/v1/locations.py
"""
Location routes - API v1

Mounted under /api/v1. All business logic delegated to LocationService.

Endpoints:
    GET /locations                                   → Public location list
    GET /manager/locations                           → Caller's locations
    POST /manager/locations                          → Create a location
    PUT /manager/locations/{location_id}             → Partial update
    PUT /manager/locations/{location_id}/cancellation-policy
    DELETE /manager/locations/{location_id}
    PUT /admin/locations/{location_id}/kitchen-license → Admin license review
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ...api.dependencies.auth import require_admin, require_manager
from ...api.dependencies.services import get_location_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.location import (
    CancellationPolicyUpdate,
    KitchenLicenseReview,
    LocationCreate,
    LocationResponse,
    LocationUpdate,
    PublicLocationResponse,
)
from ...services.location_service import LocationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["locations-v1"])


@router.get("/locations", response_model=List[PublicLocationResponse])
async def list_public_locations(
    location_service: LocationService = Depends(get_location_service),
) -> List[PublicLocationResponse]:
    locations = await asyncio.to_thread(location_service.list_public_locations)
    return [PublicLocationResponse(**loc) for loc in locations]


@router.get("/manager/locations", response_model=List[LocationResponse])
async def list_manager_locations(
    current_user: User = Depends(require_manager),
    location_service: LocationService = Depends(get_location_service),
) -> List[LocationResponse]:
    locations = await asyncio.to_thread(location_service.list_for_manager, current_user)
    return [LocationResponse(**loc) for loc in locations]


@router.post(
    "/manager/locations", response_model=LocationResponse, status_code=status.HTTP_201_CREATED
)
async def create_location(
    payload: LocationCreate,
    current_user: User = Depends(require_manager),
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    try:
        location = await asyncio.to_thread(
            location_service.create_location,
            current_user,
            payload.model_dump(exclude_unset=True),
        )
    except DomainException as e:
        raise e.to_http_exception()
    return LocationResponse(**location)


@router.put("/manager/locations/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: str,
    payload: LocationUpdate,
    current_user: User = Depends(require_manager),
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    try:
        location = await asyncio.to_thread(
            location_service.update_location,
            location_id,
            current_user,
            payload.model_dump(exclude_unset=True),
        )
    except DomainException as e:
        raise e.to_http_exception()
    return LocationResponse(**location)


@router.put(
    "/manager/locations/{location_id}/cancellation-policy", response_model=LocationResponse
)
async def update_cancellation_policy(
    location_id: str,
    payload: CancellationPolicyUpdate,
    current_user: User = Depends(require_manager),
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    try:
        location = await asyncio.to_thread(
            location_service.update_cancellation_policy,
            location_id,
            current_user,
            payload.model_dump(exclude_unset=True),
        )
    except DomainException as e:
        raise e.to_http_exception()
    return LocationResponse(**location)


@router.delete("/manager/locations/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: str,
    current_user: User = Depends(require_manager),
    location_service: LocationService = Depends(get_location_service),
) -> Response:
    try:
        await asyncio.to_thread(location_service.delete_location, location_id, current_user)
    except DomainException as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/admin/locations/{location_id}/kitchen-license", response_model=LocationResponse)
async def review_kitchen_license(
    location_id: str,
    payload: KitchenLicenseReview,
    current_user: User = Depends(require_admin),
    location_service: LocationService = Depends(get_location_service),
) -> LocationResponse:
    try:
        location = await asyncio.to_thread(
            location_service.review_kitchen_license,
            location_id,
            current_user,
            payload.status,
            payload.feedback,
            payload.expiry,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return LocationResponse(**location)


__all__ = ["router"]
