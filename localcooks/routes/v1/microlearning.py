# localcooks/routes/v1/microlearning.py
"""
Microlearning routes - API v1

``user_id`` path parameters accept the local user id or the Firebase UID.
Users read their own data; admins may read anyone's.

Endpoints:
    GET /progress/{user_id}          → Progress, completion and access tier
    POST /progress                   → Upsert progress for one video
    POST /complete                   → Confirm completion of all videos
    GET /completion/{user_id}        → Completion record
    GET /certificate/{user_id}       → Certificate link
    GET /certificate/{user_id}/pdf   → Certificate PDF
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Response

from ...api.dependencies.auth import get_current_user
from ...api.dependencies.services import get_microlearning_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.microlearning import (
    CertificateResponse,
    CompleteModuleRequest,
    CompletionResponse,
    ProgressResponse,
    ProgressUpdateResponse,
    VideoProgressUpdate,
)
from ...services.microlearning_service import MicrolearningService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["microlearning-v1"])


@router.get("/progress/{user_id}", response_model=ProgressResponse)
async def get_progress(
    user_id: str,
    current_user: User = Depends(get_current_user),
    microlearning_service: MicrolearningService = Depends(get_microlearning_service),
) -> ProgressResponse:
    try:
        result = await asyncio.to_thread(microlearning_service.get_progress, current_user, user_id)
    except DomainException as e:
        raise e.to_http_exception()
    return ProgressResponse(**result)


@router.post("/progress", response_model=ProgressUpdateResponse)
async def update_progress(
    payload: VideoProgressUpdate,
    current_user: User = Depends(get_current_user),
    microlearning_service: MicrolearningService = Depends(get_microlearning_service),
) -> ProgressUpdateResponse:
    data = payload.model_dump()
    try:
        result = await asyncio.to_thread(microlearning_service.update_progress, current_user, data)
    except DomainException as e:
        raise e.to_http_exception()
    return ProgressUpdateResponse(**result)


@router.post("/complete", response_model=CompletionResponse)
async def complete_microlearning(
    payload: CompleteModuleRequest,
    current_user: User = Depends(get_current_user),
    microlearning_service: MicrolearningService = Depends(get_microlearning_service),
) -> CompletionResponse:
    try:
        result = await asyncio.to_thread(
            microlearning_service.complete,
            current_user,
            payload.user_id,
            payload.completion_date,
            payload.video_progress,
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CompletionResponse(**result)


@router.get("/completion/{user_id}", response_model=CompletionResponse)
async def get_completion(
    user_id: str,
    current_user: User = Depends(get_current_user),
    microlearning_service: MicrolearningService = Depends(get_microlearning_service),
) -> CompletionResponse:
    try:
        result = await asyncio.to_thread(
            microlearning_service.get_completion, current_user, user_id
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CompletionResponse(**result)


@router.get("/certificate/{user_id}", response_model=CertificateResponse)
async def get_certificate(
    user_id: str,
    current_user: User = Depends(get_current_user),
    microlearning_service: MicrolearningService = Depends(get_microlearning_service),
) -> CertificateResponse:
    try:
        result = await asyncio.to_thread(
            microlearning_service.issue_certificate, current_user, user_id
        )
    except DomainException as e:
        raise e.to_http_exception()
    return CertificateResponse(**result)


@router.get("/certificate/{user_id}/pdf")
async def download_certificate_pdf(
    user_id: str,
    current_user: User = Depends(get_current_user),
    microlearning_service: MicrolearningService = Depends(get_microlearning_service),
) -> Response:
    try:
        filename, pdf = await asyncio.to_thread(
            microlearning_service.build_certificate_pdf, current_user, user_id
        )
    except DomainException as e:
        raise e.to_http_exception()
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["router"]
