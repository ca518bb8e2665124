# localcooks/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Every protected request carries a Firebase ID token as a bearer token. The
token is verified with the Admin SDK and its UID mapped to the local user
row. Signing in never creates a user: unknown UIDs must go through
``POST /api/v1/users/register`` first.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ...core.constants import ROLE_CHEF, ROLE_MANAGER
from ...core.exceptions import UnauthorizedException
from ...models.user import User
from ...repositories.user_repository import UserRepository
from ...services import firebase_auth_service
from .database import get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_firebase_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """
    Verify the bearer token and return its decoded Firebase claims.

    Raises:
        HTTPException: 401 when the token is missing or fails verification
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No auth token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return firebase_auth_service.verify_id_token(credentials.credentials)
    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Invalid auth token", "code": e.code},
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    claims: Dict[str, Any] = Depends(get_firebase_claims),
    db: Session = Depends(get_db),
) -> User:
    """Map the verified Firebase UID to the local user."""
    firebase_uid = claims.get("uid") or claims.get("user_id")
    user = UserRepository(db).get_by_firebase_uid(firebase_uid) if firebase_uid else None
    if user is None:
        logger.info(f"[AUTH] No local user for firebase uid {firebase_uid}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": "This account is not registered. Please sign up first.",
                "code": "user_not_registered",
            },
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency that ensures the caller has administrator privileges."""
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def require_manager(user: User = Depends(get_current_user)) -> User:
    if not user.has_role(ROLE_MANAGER):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Manager access required"
        )
    return user


def require_chef(user: User = Depends(get_current_user)) -> User:
    if not user.has_role(ROLE_CHEF):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Chef access required")
    return user
