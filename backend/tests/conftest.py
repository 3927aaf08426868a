"""
Test configuration and shared fixtures for the treasury chat backend.
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.pop("GEMINI_API_KEY", None)
os.environ["TRADE_DETECTION_MODE"] = "pattern"
os.environ["ENFORCE_TRADE_TRANSITIONS"] = "false"

import pytest
from unittest.mock import AsyncMock

from treasury_chat.database import Base, SessionLocal, engine, init_db
from treasury_chat.dependencies import create_access_token
from treasury_chat.models.user import User, UserRole
from treasury_chat.routes.auth import get_password_hash
from treasury_chat.services.chat_store import ChatStore


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def db():
    """Fresh in-memory schema per test."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    """Factory for users with a known password."""
    def _make_user(username="officer", role=UserRole.user):
        user = User(
            email=f"{username}@council.gov.uk",
            username=username,
            hashed_password=get_password_hash("password123"),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def officer(make_user):
    return make_user("officer", UserRole.user)


@pytest.fixture
def super_user(make_user):
    return make_user("approver", UserRole.super_user)


@pytest.fixture
def chat_turn(db, officer):
    """A session with one user message, as left behind by a chat request."""
    store = ChatStore(db)
    session = store.create_session(title="Test Conversation", user_id=officer.id)
    message = store.create_message(session.session_id, "Borrow £5m at 4.5%", is_user=True)
    return session, message


# =============================================================================
# Auth and transport
# =============================================================================

@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        token = create_access_token({"sub": user.email, "role": user.role.value})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from treasury_chat.main import app
    return TestClient(app)


@pytest.fixture
def mock_notifier():
    """Notification service that records events instead of sending them."""
    notifier = AsyncMock()
    notifier.notify_trade_update = AsyncMock()
    notifier.notify_new_message = AsyncMock()
    return notifier
