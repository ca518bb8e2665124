# localcooks/services/microlearning_service.py
"""
Food-safety microlearning: progress, completion and certificates.

Users without an approved chef application get the ``limited`` tier: they
can watch the free preview video only. Approval, an earlier completion or the
admin role unlock the ``full`` tier.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc
from ..domain.video_watch import WatchSegment, WatchTracker, is_complete
from ..models.microlearning import MicrolearningCompletion, VideoProgress
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.application_repository import ApplicationRepository
from ..repositories.microlearning_repository import (
    MicrolearningCompletionRepository,
    VideoProgressRepository,
)
from ..repositories.user_repository import UserRepository
from .base import BaseService
from .certificate_service import certificate_id_for, render_certificate_pdf
from .notification_service import NotificationService

REQUIRED_VIDEOS: Tuple[str, ...] = (
    "basics-personal-hygiene",
    "basics-temperature-danger",
    "basics-cross-contamination",
    "basics-allergen-awareness",
    "basics-food-storage",
    "basics-cooking-temps",
    "basics-cooling-reheating",
    "basics-thawing",
    "basics-receiving",
    "basics-fifo",
    "basics-illness-reporting",
    "basics-pest-control",
    "basics-chemical-safety",
    "basics-food-safety-plan",
    "howto-handwashing",
    "howto-sanitizing",
    "howto-thermometer",
    "howto-cleaning-schedule",
    "howto-equipment-cleaning",
    "howto-uniform-care",
    "howto-wound-care",
    "howto-inspection-prep",
)
FREE_PREVIEW_VIDEO = "basics-cross-contamination"

ACCESS_FULL = "full"
ACCESS_LIMITED = "limited"

CERTIFICATE_MESSAGE = (
    "Certificate for skillpass.nl food safety training preparation - "
    "Complete your official certification at skillpass.nl"
)


def _clamp_percent(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return max(0.0, min(100.0, float(value)))


def _progress_item(row: VideoProgress) -> Dict[str, Any]:
    return {
        "video_id": row.video_id,
        "progress": row.progress,
        "watched_percentage": row.watched_percentage,
        "completed": bool(row.completed),
        "is_rewatching": bool(row.is_rewatching),
        "completed_at": ensure_utc(row.completed_at),
        "updated_at": ensure_utc(row.updated_at),
    }


class MicrolearningService(BaseService):
    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        super().__init__(db)
        self.user_repository = UserRepository(db)
        self.application_repository = ApplicationRepository(db)
        self.progress_repository = VideoProgressRepository(db)
        self.completion_repository = MicrolearningCompletionRepository(db)
        self.notification_service = notification_service or NotificationService(db)

    # Access

    def resolve_target_user(self, current_user: User, identifier: str) -> User:
        """
        Resolve ``identifier`` (local id or Firebase UID) to the user whose
        training data is being read. Non-admins may only resolve themselves.
        """
        if identifier in (current_user.id, current_user.firebase_uid):
            return current_user
        if not current_user.is_admin:
            raise ForbiddenException("Access denied", code="microlearning_forbidden")
        target = self.user_repository.resolve_identifier(identifier)
        if not target:
            raise NotFoundException("User not found")
        return target

    def get_access_level(self, user: User) -> str:
        if user.is_admin or self.application_repository.has_approved(user.id):
            return ACCESS_FULL
        completion = self.completion_repository.get_for_user(user.id)
        if completion and completion.confirmed:
            return ACCESS_FULL
        return ACCESS_LIMITED

    # Progress

    def get_progress(self, current_user: User, identifier: str) -> Dict[str, Any]:
        target = self.resolve_target_user(current_user, identifier)
        rows = self.progress_repository.list_for_user(target.id)
        completion = self.completion_repository.get_for_user(target.id)
        has_approval = self.application_repository.has_approved(target.id)
        is_completed = bool(completion and completion.confirmed)
        return {
            "success": True,
            "progress": [_progress_item(row) for row in rows],
            "completion_confirmed": is_completed,
            "completed_at": ensure_utc(completion.completed_at) if completion else None,
            "has_approved_application": has_approval,
            "access_level": (
                ACCESS_FULL if current_user.is_admin or has_approval or is_completed else ACCESS_LIMITED
            ),
            "is_admin": current_user.is_admin,
        }

    @BaseService.measure_operation("update_video_progress")
    def update_progress(self, current_user: User, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Upsert progress for one video.

        When the player posts raw ``segments`` with a ``duration`` the watched
        percentage is recomputed here rather than trusted from the client.
        """
        target = self.resolve_target_user(current_user, data["user_id"])
        video_id = data["video_id"]
        if video_id not in REQUIRED_VIDEOS:
            raise ValidationException(f"Unknown video: {video_id}", code="unknown_video")

        if video_id != FREE_PREVIEW_VIDEO and self.get_access_level(target) == ACCESS_LIMITED:
            raise ForbiddenException(
                "Application approval required to access this video",
                code="microlearning_limited",
                details={"firstVideoOnly": True, "accessLevel": ACCESS_LIMITED},
            )

        progress = _clamp_percent(data.get("progress"))
        watched = data.get("watched_percentage")
        completed = bool(data.get("completed"))

        segments = data.get("segments")
        duration = data.get("duration")
        if segments is not None and duration:
            tracker = WatchTracker(
                duration=duration,
                segments=[WatchSegment(s["start"], s["end"]) for s in segments],
            )
            watched = tracker.watched_percentage
            completed = completed or tracker.completed
        watched_pct = _clamp_percent(watched if watched is not None else progress)
        if watched is not None and not completed:
            completed = is_complete(watched_pct)

        now = datetime.now(timezone.utc)
        row = self.progress_repository.get_for_video(target.id, video_id)
        with self.transaction():
            if row is None:
                row = self.progress_repository.create(
                    user_id=target.id,
                    video_id=video_id,
                    progress=progress,
                    watched_percentage=watched_pct,
                    completed=completed,
                    is_rewatching=bool(data.get("is_rewatching")),
                    completed_at=(data.get("completed_at") or now) if completed else None,
                )
            else:
                row.progress = progress
                row.watched_percentage = max(row.watched_percentage or 0.0, watched_pct)
                row.is_rewatching = bool(data.get("is_rewatching"))
                if completed and not row.completed:
                    row.completed = True
                    row.completed_at = data.get("completed_at") or now
                row.updated_at = now
        return {"success": True, "message": "Progress updated", "progress": _progress_item(row)}

    # Completion

    @BaseService.measure_operation("complete_microlearning")
    def complete(
        self,
        current_user: User,
        identifier: str,
        completion_date: Optional[datetime] = None,
        video_progress: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        target = self.resolve_target_user(current_user, identifier)

        if not current_user.is_admin and not self.application_repository.has_approved(target.id):
            raise ForbiddenException(
                "Application approval required to complete full certification",
                code="approval_required",
                details={"requiresApproval": True, "accessLevel": ACCESS_LIMITED},
            )

        if not current_user.is_admin:
            done = self.progress_repository.completed_video_ids(target.id)
            missing = [video for video in REQUIRED_VIDEOS if video not in done]
            if missing:
                raise ValidationException(
                    "All required videos must be completed before certification",
                    code="videos_incomplete",
                    details={"missingVideos": missing},
                )

        completed_at = ensure_utc(completion_date) or datetime.now(timezone.utc)
        snapshot = video_progress
        if snapshot is None:
            snapshot = [
                {"videoId": row.video_id, "completed": bool(row.completed)}
                for row in self.progress_repository.list_for_user(target.id)
            ]

        completion = self.completion_repository.get_for_user(target.id)
        with self.transaction():
            if completion is None:
                completion = self.completion_repository.create(
                    user_id=target.id,
                    completed_at=completed_at,
                    confirmed=True,
                    certificate_generated=False,
                    video_progress=snapshot,
                )
            else:
                completion.completed_at = completed_at
                completion.confirmed = True
                completion.certificate_generated = False
                completion.video_progress = snapshot

        self.logger.info(f"User {target.id} completed microlearning")
        prometheus_metrics.record_microlearning_completion()
        self.notification_service.send_microlearning_completed(
            target, completed_at, len(REQUIRED_VIDEOS)
        )
        return self._completion_payload(completion)

    def get_completion(self, current_user: User, identifier: str) -> Dict[str, Any]:
        target = self.resolve_target_user(current_user, identifier)
        completion = self.completion_repository.get_for_user(target.id)
        if not completion:
            raise NotFoundException("No completion found", code="completion_not_found")
        return self._completion_payload(completion)

    @staticmethod
    def _completion_payload(completion: MicrolearningCompletion) -> Dict[str, Any]:
        return {
            "success": True,
            "completion_confirmed": bool(completion.confirmed),
            "completed_at": ensure_utc(completion.completed_at),
            "certificate_generated": bool(completion.certificate_generated),
            "video_progress": completion.video_progress,
        }

    # Certificates

    def get_confirmed_completion(
        self, current_user: User, identifier: str
    ) -> Tuple[User, MicrolearningCompletion]:
        target = self.resolve_target_user(current_user, identifier)
        completion = self.completion_repository.get_for_user(target.id)
        if not completion or not completion.confirmed:
            raise NotFoundException(
                "No confirmed completion found", code="completion_not_found"
            )
        return target, completion

    @BaseService.measure_operation("issue_certificate")
    def issue_certificate(
        self, current_user: User, identifier: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        target, completion = self.get_confirmed_completion(current_user, identifier)
        issued_at = now or datetime.now(timezone.utc)
        timestamp_ms = int(issued_at.timestamp() * 1000)
        prefix = settings.certificate_url_prefix.rstrip("/")

        with self.transaction():
            completion.certificate_generated = True

        return {
            "success": True,
            "certificate_url": f"{prefix}/microlearning-{target.id}-{timestamp_ms}.pdf",
            "completion_date": ensure_utc(completion.completed_at),
            "message": CERTIFICATE_MESSAGE,
        }

    def build_certificate_pdf(self, current_user: User, identifier: str) -> Tuple[str, bytes]:
        """Return ``(filename, pdf_bytes)`` for a confirmed completion."""
        target, completion = self.get_confirmed_completion(current_user, identifier)
        completed_at = ensure_utc(completion.completed_at)
        certificate_id = certificate_id_for(target.id, completed_at)
        pdf = render_certificate_pdf(
            recipient_name=target.display_name or target.username,
            completed_at=completed_at,
            certificate_id=certificate_id,
            modules=[video_title(video_id) for video_id in REQUIRED_VIDEOS],
        )
        return f"microlearning-{target.id}.pdf", pdf


def video_title(video_id: str) -> str:
    """``basics-cooking-temps`` -> ``Cooking Temps``."""
    _, _, slug = video_id.partition("-")
    return slug.replace("-", " ").title()
