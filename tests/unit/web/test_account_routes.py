"""Tests for the account HTTP routes."""

import pytest
from fastapi.testclient import TestClient

from sessionward.app import App
from sessionward.web.server import create_fastapi_app

ORIGIN = "https://app.example"
CREDENTIALS = {"email": "alice@example.com", "password": "correct horse battery"}


class RecordingDelivery:
    def __init__(self):
        self.sent = []

    async def deliver(self, email, purpose, token):
        self.sent.append((email, purpose, token))


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def client(config_factory, delivery):
    config = config_factory(transmission_mode="header", allowed_origins=[])
    with TestClient(create_fastapi_app(App(config, delivery=delivery), config)) as client:
        yield client


def login(client, password=CREDENTIALS["password"]):
    response = client.post("/api/v1/auth/login", json={**CREDENTIALS, "password": password})
    return response


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token(client):
    assert client.post("/api/v1/accounts", json=CREDENTIALS).status_code == 201
    return login(client).json()["token"]


class TestCreateAccount:
    """Tests for account registration."""

    def test_create(self, client):
        """Test that creating an account returns its public view."""
        response = client.post("/api/v1/accounts", json=CREDENTIALS)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "alice@example.com"
        assert body["email_verified"] is False
        assert "password_hash" not in body

    def test_duplicate(self, client):
        """Test that a second account with the same email is a 400."""
        client.post("/api/v1/accounts", json=CREDENTIALS)
        response = client.post("/api/v1/accounts", json=CREDENTIALS)
        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

    def test_weak_password(self, client):
        """Test that a weak password is a 400."""
        response = client.post("/api/v1/accounts", json={**CREDENTIALS, "password": "short"})
        assert response.status_code == 400

    def test_me(self, client, token):
        """Test that the current account is returned for a valid session."""
        response = client.get("/api/v1/accounts/me", headers=auth_headers(token))
        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"


class TestChangePassword:
    """Tests for the change-password endpoint."""

    def test_change_password_rotates_sessions(self, client, token):
        """Test that changing the password ends old sessions and returns a new token."""
        other = login(client).json()["token"]

        response = client.post(
            "/api/v1/accounts/change-password",
            json={"old_password": CREDENTIALS["password"], "new_password": "a brand new secret"},
            headers=auth_headers(token),
        )

        assert response.status_code == 200
        fresh = response.json()["token"]
        assert client.get("/api/v1/auth/session", headers=auth_headers(fresh)).status_code == 200
        for stale in (token, other):
            assert client.get("/api/v1/auth/session", headers=auth_headers(stale)).status_code == 401
        assert login(client, "a brand new secret").status_code == 200
        assert login(client).status_code == 401

    def test_wrong_old_password(self, client, token):
        """Test that a wrong old password is a 401 and keeps the session."""
        response = client.post(
            "/api/v1/accounts/change-password",
            json={"old_password": "not my password", "new_password": "a brand new secret"},
            headers=auth_headers(token),
        )
        assert response.status_code == 401
        assert client.get("/api/v1/auth/session", headers=auth_headers(token)).status_code == 200


class TestPasswordReset:
    """Tests for the reset-by-email flow."""

    def test_reset_flow(self, client, token, delivery):
        """Test that a delivered reset token sets the new password and ends sessions."""
        assert client.post("/api/v1/accounts/password-reset", json={"email": "alice@example.com"}).status_code == 202
        [(email, purpose, reset_token)] = delivery.sent
        assert email == "alice@example.com"
        assert purpose == "password-reset"

        response = client.post(
            "/api/v1/accounts/password-reset/confirm",
            json={"token": reset_token, "new_password": "a brand new secret"},
        )

        assert response.status_code == 204
        assert client.get("/api/v1/auth/session", headers=auth_headers(token)).status_code == 401
        assert login(client, "a brand new secret").status_code == 200

    def test_reset_token_single_use(self, client, token, delivery):
        """Test that a reset token cannot be used twice."""
        client.post("/api/v1/accounts/password-reset", json={"email": "alice@example.com"})
        [(_, _, reset_token)] = delivery.sent
        body = {"token": reset_token, "new_password": "a brand new secret"}

        assert client.post("/api/v1/accounts/password-reset/confirm", json=body).status_code == 204
        assert client.post("/api/v1/accounts/password-reset/confirm", json=body).status_code == 401

    def test_unknown_email_looks_the_same(self, client, delivery):
        """Test that resets for unknown emails answer 202 without delivering."""
        response = client.post("/api/v1/accounts/password-reset", json={"email": "nobody@example.com"})
        assert response.status_code == 202
        assert delivery.sent == []


class TestEmailVerification:
    """Tests for the email verification endpoints."""

    def test_verification_flow(self, client, token, delivery):
        """Test that confirming the delivered token marks the email verified."""
        assert client.post("/api/v1/accounts/email-verification", headers=auth_headers(token)).status_code == 202
        [(_, purpose, verify_token)] = delivery.sent
        assert purpose == "email-verify"

        response = client.post("/api/v1/accounts/email-verification/confirm", json={"token": verify_token})

        assert response.status_code == 204
        assert client.get("/api/v1/accounts/me", headers=auth_headers(token)).json()["email_verified"] is True

    def test_verification_token_cannot_reset_password(self, client, token, delivery):
        """Test that an email verification token is refused by the reset endpoint."""
        client.post("/api/v1/accounts/email-verification", headers=auth_headers(token))
        [(_, _, verify_token)] = delivery.sent

        response = client.post(
            "/api/v1/accounts/password-reset/confirm",
            json={"token": verify_token, "new_password": "a brand new secret"},
        )

        assert response.status_code == 401
        assert login(client).status_code == 200

    def test_requires_session(self, client):
        """Test that requesting verification needs a session."""
        assert client.post("/api/v1/accounts/email-verification").status_code == 401
