"""
Pytest configuration and fixtures for ClipStudio API tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clipstudio.database import Base, get_db
from clipstudio.limiter import limiter
from clipstudio.main import app
from clipstudio.models.media import SourceMedia
from clipstudio.models.user import User
from clipstudio.auth import get_password_hash, create_access_token
from clipstudio.pipeline import RenderStrategy, SegmentProposer
from clipstudio.routes.clips import get_render_strategy, get_segment_proposer

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None

SOURCE_URL = "https://media.example.com/uploads/episode.mp4"


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()

    app.dependency_overrides[get_db] = get_test_db
    # No AI key and no render credentials: fallbacks only, no network
    app.dependency_overrides[get_segment_proposer] = lambda: SegmentProposer(None)
    app.dependency_overrides[get_render_strategy] = lambda: RenderStrategy()

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


def _make_user(db, email):
    user = User(
        email=email,
        hashed_password=get_password_hash("testpassword123"),
        display_name=email.split("@")[0],
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db):
    return _make_user(db, "test@example.com")


@pytest.fixture(scope="function")
def other_user(db):
    return _make_user(db, "other@example.com")


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Bearer headers for the test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture(scope="function")
def make_media(db, test_user):
    """Factory for source media rows owned by the test user unless told otherwise."""
    def _make(**overrides):
        fields = {
            "user_id": test_user.id,
            "file_name": "episode.mp4",
            "status": "ready",
            "duration_seconds": 95.0,
            "file_url": SOURCE_URL,
        }
        fields.update(overrides)
        media = SourceMedia(**fields)
        db.add(media)
        db.commit()
        db.refresh(media)
        return media
    return _make


@pytest.fixture(scope="function")
def source_media(make_media):
    """A ready 95 second source with a plain file URL."""
    return make_media()
