# localcooks/routes/v1/applications.py
"""
Chef application routes - API v1

Endpoints:
    POST /                      → Submit an application
    GET /my-applications        → Caller's applications
    GET /                       → All applications (admin)
    PATCH /{id}/status          → Set status (admin)
    PATCH /{id}/cancel          → Cancel own application
"""

import asyncio
import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ...api.dependencies.auth import get_current_user, require_admin
from ...api.dependencies.services import get_application_service
from ...core.exceptions import DomainException
from ...models.application import Application
from ...models.user import User
from ...schemas.application import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
)
from ...services.application_service import ApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["applications-v1"])


def _to_response(application: Application) -> ApplicationResponse:
    return ApplicationResponse(
        id=application.id,
        user_id=application.user_id,
        full_name=application.full_name,
        email=application.email,
        phone=application.phone,
        food_safety_license=application.food_safety_license,
        food_establishment_cert=application.food_establishment_cert,
        kitchen_preference=application.kitchen_preference,
        feedback=application.feedback,
        status=application.status,
        created_at=application.created_at,
    )


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    payload: ApplicationCreate,
    current_user: User = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service),
) -> ApplicationResponse:
    try:
        application = await asyncio.to_thread(
            application_service.submit, current_user, payload.model_dump()
        )
    except DomainException as e:
        raise e.to_http_exception()
    return _to_response(application)


@router.get("/my-applications", response_model=List[ApplicationResponse])
async def list_my_applications(
    current_user: User = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service),
) -> List[ApplicationResponse]:
    applications = await asyncio.to_thread(application_service.list_for_user, current_user)
    return [_to_response(application) for application in applications]


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    current_user: User = Depends(require_admin),
    application_service: ApplicationService = Depends(get_application_service),
) -> List[ApplicationResponse]:
    applications = await asyncio.to_thread(application_service.list_all)
    return [_to_response(application) for application in applications]


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    current_user: User = Depends(require_admin),
    application_service: ApplicationService = Depends(get_application_service),
) -> ApplicationResponse:
    try:
        application = await asyncio.to_thread(
            application_service.update_status, application_id, payload.status, current_user
        )
    except DomainException as e:
        raise e.to_http_exception()
    return _to_response(application)


@router.patch("/{application_id}/cancel", response_model=ApplicationResponse)
async def cancel_application(
    application_id: str,
    current_user: User = Depends(get_current_user),
    application_service: ApplicationService = Depends(get_application_service),
) -> ApplicationResponse:
    try:
        application = await asyncio.to_thread(
            application_service.cancel, application_id, current_user
        )
    except DomainException as e:
        raise e.to_http_exception()
    return _to_response(application)


__all__ = ["router"]
