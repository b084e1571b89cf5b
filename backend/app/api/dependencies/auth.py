# backend/app/api/dependencies/auth.py
"""
Caller identity dependencies.

Authentication happens upstream: the gateway resolves the session and
forwards the user id in the X-User-Id header. We only check that the id
belongs to an active user.
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ...core.exceptions import UnauthorizedException
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


def get_current_user_optional(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the caller if a user id was forwarded; anonymous otherwise."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        return None
    user = RepositoryFactory.create_user_repository(db).get_active(user_id)
    if user is None:
        logger.warning("Unknown or inactive user id forwarded", extra={"user_id": user_id})
        raise UnauthorizedException("Unknown user", details={"user_id": user_id})
    return user


def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    """
    Resolve the caller or fail with 401.

    Raises:
        UnauthorizedException: Header missing, or no active user with that id
    """
    if user is None:
        raise UnauthorizedException("Authentication required")
    return user
