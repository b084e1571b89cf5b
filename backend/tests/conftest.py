# backend/tests/conftest.py
"""
Pytest configuration.

Tests run against an in-memory SQLite database shared through a
StaticPool; every test gets freshly created tables.
"""

import os
import sys

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["IS_TESTING"] = "true"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from typing import Callable, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session

from app import models  # noqa: F401
from app.api.dependencies.database import get_db as api_get_db
from app.core.constants import USER_ID_HEADER
from app.core.enums import PostStatus
from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.models.trade_post import TradePost
from app.models.user import User

if not engine.url.drivername.startswith("sqlite"):
    raise RuntimeError(f"Refusing to run tests against {engine.url.drivername}")


@pytest.fixture(scope="function")
def db():
    """Create a new database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session):
    """Create a test client bound to the test session."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[api_get_db] = override_get_db

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


def _create_user(db: Session, username: str, **kwargs) -> User:
    user = User(username=username, display_name=username.title(), **kwargs)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def alice(db: Session) -> User:
    return _create_user(db, "alice")


@pytest.fixture
def bob(db: Session) -> User:
    return _create_user(db, "bob")


@pytest.fixture
def carol(db: Session) -> User:
    return _create_user(db, "carol")


@pytest.fixture
def make_post(db: Session) -> Callable[..., TradePost]:
    """Factory for posts in any status."""

    def _make(
        owner: User,
        give: str = "Photocard A",
        want: str = "Photocard B",
        status: PostStatus = PostStatus.ACTIVE,
        event_id: Optional[str] = None,
    ) -> TradePost:
        post = TradePost(
            owner_id=owner.id,
            give_description=give,
            want_description=want,
            status=status.value,
            event_id=event_id,
        )
        db.add(post)
        db.commit()
        return post

    return _make


def auth_headers_for(user: User) -> dict:
    return {USER_ID_HEADER: user.id}


@pytest.fixture
def alice_headers(alice: User) -> dict:
    return auth_headers_for(alice)


@pytest.fixture
def bob_headers(bob: User) -> dict:
    return auth_headers_for(bob)


@pytest.fixture
def carol_headers(carol: User) -> dict:
    return auth_headers_for(carol)
