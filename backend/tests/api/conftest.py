"""
API test fixtures.

The app runs against the shared in-memory store from the root conftest, so
tests can seed state through the store or the service fixtures and then
exercise the HTTP surface.
"""

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import ServiceContainer
from tests.conftest import TEST_JWT_SECRET, create_test_token


def auth_for(user_id: str, email: str = None) -> dict[str, str]:
    """Authorization headers for a user, with a token signed by the test secret."""
    token = create_test_token(user_id=user_id, email=email or f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def container(store) -> ServiceContainer:
    return ServiceContainer(store=store)


@pytest.fixture
def client(container, monkeypatch):
    """A TestClient whose services share the test store and accept test tokens."""
    monkeypatch.setattr("api.dependencies._container", container)
    with patch("api.middleware.auth.get_settings") as mock_settings:
        mock_settings.return_value.supabase_jwt_secret = TEST_JWT_SECRET
        yield TestClient(create_app())
