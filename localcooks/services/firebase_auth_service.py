"""
Firebase ID token verification.

The Admin SDK app is created lazily on first use. Credentials come from the
inline service-account JSON in settings; without it the SDK falls back to
Application Default Credentials with the configured project id.
"""

import json
import logging
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials

from ..core.config import settings
from ..core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)

_FIREBASE_APP: Optional[firebase_admin.App] = None


def get_firebase_app() -> firebase_admin.App:
    global _FIREBASE_APP
    if _FIREBASE_APP is not None:
        return _FIREBASE_APP

    raw_credentials = settings.firebase_credentials()
    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
    if raw_credentials:
        cred = credentials.Certificate(json.loads(raw_credentials))
        _FIREBASE_APP = firebase_admin.initialize_app(cred, options)
    else:
        _FIREBASE_APP = firebase_admin.initialize_app(options=options)
    logger.info("[AUTH] Firebase Admin initialized (project=%s)", settings.firebase_project_id)
    return _FIREBASE_APP


def verify_id_token(id_token: str) -> Dict[str, Any]:
    """
    Verify a Firebase ID token and return its decoded claims.

    Raises:
        UnauthorizedException: token is malformed, expired, revoked or signed
            for another project.
    """
    try:
        return firebase_auth.verify_id_token(
            id_token,
            app=get_firebase_app(),
            clock_skew_seconds=settings.firebase_clock_skew_seconds,
        )
    except firebase_auth.ExpiredIdTokenError as e:
        logger.warning(f"[AUTH] Expired Firebase token: {e}")
        raise UnauthorizedException("Auth token expired", code="token_expired")
    except firebase_auth.RevokedIdTokenError as e:
        logger.warning(f"[AUTH] Revoked Firebase token: {e}")
        raise UnauthorizedException("Auth token revoked", code="token_revoked")
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        logger.warning(f"[AUTH] Invalid Firebase token: {e}")
        raise UnauthorizedException("Invalid auth token", code="invalid_token")
