"""
Tests for the signup, signin and signout endpoints.
"""

import pytest


SIGNUP = "/api/v1/auth/signup"
SIGNIN = "/api/v1/auth/signin"
SIGNOUT = "/api/v1/auth/signout"


def test_signup_creates_user_and_sets_cookie(client):
    response = client.post(
        SIGNUP,
        json={"name": "Alice", "email": "Alice@Example.com", "password": "secret123"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User registered"
    assert body["user"] == {"id": 1, "name": "Alice", "email": "alice@example.com", "role": "user"}
    assert "password" not in response.text
    assert response.cookies.get("token")
    set_cookie = response.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie


def test_signup_duplicate_email_is_conflict(client, register):
    register("Alice", "alice@example.com")

    response = client.post(
        SIGNUP,
        json={"name": "Other", "email": "alice@example.com", "password": "secret123"},
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Conflict", "message": "User with this email already exists"}


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"name": "A", "email": "a@example.com", "password": "secret123"}, "name"),
        ({"name": "Alice", "email": "not-an-email", "password": "secret123"}, "email"),
        ({"name": "Alice", "email": "a@example.com", "password": "123"}, "password"),
        ({"name": "Alice", "email": "a@example.com", "password": "secret123", "role": "root"}, "role"),
        ({"name": "Alice", "password": "secret123"}, "email"),
    ],
)
def test_signup_validation_errors(client, payload, field):
    response = client.post(SIGNUP, json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert field in [detail["field"] for detail in body["details"]]


def test_signup_with_explicit_admin_role(client):
    response = client.post(
        SIGNUP,
        json={"name": "Root", "email": "root@example.com", "password": "secret123", "role": "admin"},
    )

    assert response.status_code == 201
    assert response.json()["user"]["role"] == "admin"


def test_signin_sets_cookie_usable_for_requests(client, register):
    user, _ = register("Alice", "alice@example.com", password="secret123")

    response = client.post(SIGNIN, json={"email": "alice@example.com", "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["message"] == "User signed in successfully"
    assert response.json()["user"]["id"] == user["id"]
    # the client keeps the cookie, so the next call is authenticated by it
    me = client.get(f"/api/v1/users/{user['id']}")
    assert me.status_code == 200


def test_signin_with_wrong_password(client, register):
    register("Alice", "alice@example.com", password="secret123")

    response = client.post(SIGNIN, json={"email": "alice@example.com", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"
    assert "token" not in response.cookies


def test_signout_clears_cookie(client, register):
    user, _ = register("Alice", "alice@example.com")
    client.post(SIGNIN, json={"email": "alice@example.com", "password": "secret123"})

    response = client.post(SIGNOUT)

    assert response.status_code == 200
    assert response.json() == {"message": "User signed out successfully"}
    assert client.get(f"/api/v1/users/{user['id']}").status_code == 401


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
