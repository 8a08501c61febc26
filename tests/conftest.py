"""
Shared fixtures for the Account API tests.

Every test gets its own application built by ``create_app`` over a
SQLite file in ``tmp_path``, so no state leaks between tests.
"""

from typing import Callable, Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from account_api.app.core.config import Settings
from account_api.app.core.db import UserStore
from account_api.app.main import create_app


TEST_SECRET = "test-secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=str(tmp_path / "accounts.db"),
        secret_key=TEST_SECRET,
        access_token_expire_minutes=30,
        log_level="WARNING",
    )


@pytest.fixture
def store(settings) -> UserStore:
    store = UserStore(settings.database_url)
    store.init_schema()
    return store


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def register(client) -> Callable[..., Tuple[Dict, str]]:
    """Register through the API and return ``(user, token)``.

    The cookie jar is cleared afterwards so each request in a test
    states its own credentials explicitly.
    """

    def _register(name: str, email: str, role: str = "user", password: str = "secret123") -> Tuple[Dict, str]:
        response = client.post(
            "/api/v1/auth/signup",
            json={"name": name, "email": email, "password": password, "role": role},
        )
        assert response.status_code == 201, response.text
        token = response.cookies.get("token")
        assert token
        client.cookies.clear()
        return response.json()["user"], token

    return _register


@pytest.fixture
def bearer() -> Callable[[str], Dict[str, str]]:
    def _bearer(token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    return _bearer
