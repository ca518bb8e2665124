"""Repository for user lookups by Firebase UID and Stripe account."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_firebase_uid(self, firebase_uid: str) -> Optional[User]:
        return self.find_one_by(firebase_uid=firebase_uid)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.find_one_by(username=username)

    def get_by_stripe_account_id(self, account_id: str) -> Optional[User]:
        return self.find_one_by(stripe_connect_account_id=account_id)

    def resolve_identifier(self, identifier: str) -> Optional[User]:
        """Look up a user by local id, falling back to Firebase UID."""
        return self.get_by_id(identifier, load_relationships=False) or self.get_by_firebase_uid(
            identifier
        )
