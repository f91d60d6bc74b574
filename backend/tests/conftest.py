"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
JWT helpers, a fresh in-memory store per test, and services wired on top of it.
"""

import pytest
import pytest_asyncio
from datetime import datetime, timezone, timedelta
from typing import Optional
import jwt  # PyJWT

from shared.config import Settings
from modules.store.memory import InMemoryStore
from modules.store.models import User
from modules.store.factory import reset_membership_store
from modules.quotas.service import QuotaService, reset_quota_service
from modules.groups.service import GroupService, reset_group_service
from modules.help_requests.service import RequestLifecycleService, reset_request_service
from modules.help_requests.models import CreateHelpRequest
from modules.notifications.models import NotificationMessage
from modules.notifications.service import NotificationService, reset_notification_service
from modules.users.service import UserService, reset_user_service
from api.dependencies import reset_container


# Test JWT secret (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    email_verified: bool = True,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as verified

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "email_confirmed_at": now.isoformat() if email_verified else None,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


def add_user(
    store: InMemoryStore,
    user_id: str,
    email: Optional[str] = None,
    name: str = "",
    is_admin: bool = False,
) -> User:
    """Put a user profile straight into the store."""
    return store.upsert_user(
        User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            name=name or user_id.title(),
            is_admin=is_admin,
        )
    )


def request_form(group_id: str, **overrides) -> CreateHelpRequest:
    """A valid CreateHelpRequest due tomorrow."""
    data = {
        "group_id": group_id,
        "item_description": "Milk",
        "needed_by": datetime.now(timezone.utc) + timedelta(days=1),
    }
    data.update(overrides)
    return CreateHelpRequest(**data)


class RecordingSender:
    """Notification sender that keeps every message it is given."""

    def __init__(self):
        self.messages: list[NotificationMessage] = []

    async def send(self, message: NotificationMessage) -> None:
        self.messages.append(message)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset every service singleton before and after each test."""
    resets = [
        reset_membership_store,
        reset_quota_service,
        reset_group_service,
        reset_request_service,
        reset_notification_service,
        reset_user_service,
        reset_container,
    ]
    for reset in resets:
        reset()
    yield
    for reset in resets:
        reset()


@pytest.fixture
def settings() -> Settings:
    """Settings with the default limits, independent of any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def quotas(store, settings) -> QuotaService:
    return QuotaService(store, settings)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def notifications(store, sender) -> NotificationService:
    return NotificationService(store, sender)


@pytest.fixture
def groups(store, quotas, settings) -> GroupService:
    return GroupService(store, quotas, settings)


@pytest.fixture
def lifecycle(store, quotas, notifications, settings) -> RequestLifecycleService:
    return RequestLifecycleService(store, quotas, notifications=notifications, settings=settings)


@pytest.fixture
def users(store) -> UserService:
    return UserService(store)


@pytest.fixture
def alice(store) -> User:
    return add_user(store, "alice", name="Alice")


@pytest.fixture
def bob(store) -> User:
    return add_user(store, "bob", name="Bob")


@pytest.fixture
def carol(store) -> User:
    return add_user(store, "carol", name="Carol")


@pytest_asyncio.fixture
async def group(groups, alice, bob, carol):
    """A group owned by alice, with bob and carol as members."""
    created = await groups.create_group(alice.id, "Maple Street")
    for member in (bob, carol):
        invite = await groups.create_invite(created.id, alice.id, member.email)
        await groups.join_group(invite.token, member.id)
    return created


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}
