# localcooks/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import (
    get_current_user,
    get_firebase_claims,
    require_admin,
    require_chef,
    require_manager,
)
from .database import get_db

__all__ = [
    # Auth
    "get_firebase_claims",
    "get_current_user",
    "require_admin",
    "require_manager",
    "require_chef",
    # Database
    "get_db",
]
