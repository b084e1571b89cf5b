# backend/app/repositories/user_repository.py
"""
User Repository

Read access to the user projection used for author and participant
summaries and for resolving the caller identity.
"""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_active(self, user_id: str) -> Optional[User]:
        """Return the user only if the account is active."""
        return (
            self.db.query(User)
            .filter(User.id == user_id, User.is_active.is_(True))
            .first()
        )
