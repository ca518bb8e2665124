# localcooks/routes/v1/users.py
"""
User routes - API v1

Endpoints:
    POST /register       → Create the local user for a Firebase account
    GET /me              → Current user
    POST /update-roles   → Chef / delivery partner role selection
    POST /seen-welcome   → Dismiss the welcome screen
    GET /profile         → Profile with Stripe and onboarding fields
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user, get_firebase_claims
from ...api.dependencies.services import get_user_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.user import (
    SuccessResponse,
    UpdateRolesRequest,
    UserProfileResponse,
    UserResponse,
)
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


@router.post("/register", response_model=UserResponse)
async def register_user(
    claims: Dict[str, Any] = Depends(get_firebase_claims),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Register the Firebase account behind the bearer token; idempotent per UID."""
    try:
        user = await asyncio.to_thread(user_service.register_from_claims, claims)
    except DomainException as e:
        raise e.to_http_exception()
    return UserResponse(**user.to_dict())


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(**current_user.to_dict())


@router.post("/update-roles", response_model=UserResponse)
async def update_roles(
    payload: UpdateRolesRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(
            user_service.update_roles,
            current_user,
            payload.is_chef,
            payload.is_delivery_partner,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return UserResponse(**user.to_dict())


@router.post("/seen-welcome", response_model=SuccessResponse)
async def mark_welcome_seen(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(user_service.mark_welcome_seen, current_user)
    except DomainException as e:
        raise e.to_http_exception()
    return SuccessResponse(success=True)


@router.get("/profile", response_model=UserProfileResponse)
async def read_profile(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserProfileResponse:
    try:
        profile = await asyncio.to_thread(user_service.get_profile, current_user)
    except DomainException as e:
        raise e.to_http_exception()
    return UserProfileResponse(**profile)


__all__ = ["router"]
