"""Microlearning progress, completion and certificate schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class WatchSegmentIn(StrictRequestModel):
    start: float
    end: float


class VideoProgressUpdate(StrictRequestModel):
    user_id: str = Field(..., description="Local user id or Firebase UID")
    video_id: str
    progress: float = 0
    completed: bool = False
    watched_percentage: Optional[float] = None
    is_rewatching: bool = False
    completed_at: Optional[datetime] = None
    duration: Optional[float] = Field(
        default=None, description="Video length in seconds, required with segments"
    )
    segments: Optional[List[WatchSegmentIn]] = Field(
        default=None, description="Raw continuous watch segments from the player"
    )


class CompleteModuleRequest(StrictRequestModel):
    user_id: str
    completion_date: Optional[datetime] = None
    video_progress: Optional[List[Dict[str, Any]]] = None


class VideoProgressItem(StrictModel):
    video_id: str
    progress: float
    watched_percentage: float
    completed: bool
    is_rewatching: bool = False
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProgressResponse(StrictModel):
    success: bool = True
    progress: List[VideoProgressItem]
    completion_confirmed: bool
    completed_at: Optional[datetime] = None
    has_approved_application: bool
    access_level: str
    is_admin: bool


class ProgressUpdateResponse(StrictModel):
    success: bool = True
    message: str = "Progress updated"
    progress: VideoProgressItem


class CompletionResponse(StrictModel):
    success: bool = True
    completion_confirmed: bool
    completed_at: datetime
    certificate_generated: bool = False
    video_progress: Optional[List[Dict[str, Any]]] = None


class CertificateResponse(StrictModel):
    success: bool = True
    certificate_url: str
    completion_date: datetime
    message: str
