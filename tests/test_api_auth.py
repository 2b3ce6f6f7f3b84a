"""
tests/test_api_auth.py -- Integration tests for the /api/v1/auth routes.

These tests exercise the full stack: FastAPI routing -> request validation
-> dependency injection -> AuthService -> UserStore -> error envelope.

Coverage:
  - POST /register: 201 {id, email}; duplicate 400; bad email / short password 422
  - password limits are UTF-8 bytes: 80-byte multibyte passwords 422 on register and login
  - POST /login: 200 {token} with no-store; unknown email and wrong password 401 alike
  - GET /me: 200 with a valid Bearer token; 401 for missing/malformed/expired tokens;
    404 for a valid token whose user does not exist
  - GET /me: 401, not 500, for out-of-range sub or exp claims

Fixtures used (from conftest.py):
  - api_client: (client, service) -- each test uses its own email so module-scoped
    state does not leak between tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from fastapi.testclient import TestClient
from jose import jwt

from auth.errors import PasswordTooLongError
from auth.models import User
from auth.service import AuthConfig, AuthService


def _register(client: TestClient, email: str, password: str = "secret1"):
    return client.post("/api/v1/auth/register", json={"email": email, "password": password})


def _login(client: TestClient, email: str, password: str = "secret1"):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestRegisterRoute:
    def test_register_returns_201_with_id_and_email(self, api_client):
        client, _ = api_client
        resp = _register(client, "reg-ok@gatekeeper.io")
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert set(data) == {"id", "email"}
        assert isinstance(data["id"], int)
        assert data["email"] == "reg-ok@gatekeeper.io"

    def test_duplicate_email_returns_400(self, api_client):
        client, _ = api_client
        assert _register(client, "reg-dupe@gatekeeper.io").status_code == 201
        resp = _register(client, "reg-dupe@gatekeeper.io", "different1")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "email_exists"

    def test_invalid_email_returns_422(self, api_client):
        client, _ = api_client
        resp = _register(client, "not-an-email")
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_short_password_returns_422(self, api_client):
        client, _ = api_client
        resp = _register(client, "reg-short@gatekeeper.io", "12345")
        assert resp.status_code == 422

    def test_validation_error_does_not_echo_password(self, api_client):
        client, _ = api_client
        resp = _register(client, "reg-echo@gatekeeper.io", "pw123")
        assert resp.status_code == 422
        assert "pw123" not in resp.text

    def test_six_character_password_accepted(self, api_client):
        client, _ = api_client
        assert _register(client, "reg-six@gatekeeper.io", "123456").status_code == 201

    def test_multibyte_password_over_72_bytes_returns_422(self, api_client):
        client, _ = api_client
        resp = _register(client, "reg-multibyte@gatekeeper.io", "\u00e9" * 40)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"
        assert "72 bytes" in resp.json()["error"]["detail"]

    def test_multibyte_password_within_72_bytes_accepted(self, api_client):
        client, _ = api_client
        password = "\u00e9" * 30
        assert _register(client, "reg-accents@gatekeeper.io", password).status_code == 201
        assert _login(client, "reg-accents@gatekeeper.io", password).status_code == 200

    def test_password_too_long_from_service_returns_400(self, api_client):
        client, service = api_client
        with patch.object(service, "register", side_effect=PasswordTooLongError()):
            resp = _register(client, "reg-toolong@gatekeeper.io")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "password_too_long"


class TestLoginRoute:
    def test_login_returns_token(self, api_client):
        client, service = api_client
        user_id = _register(client, "login-ok@gatekeeper.io").json()["id"]
        resp = _login(client, "login-ok@gatekeeper.io")
        assert resp.status_code == 200, resp.text
        assert resp.headers["cache-control"] == "no-store"
        assert service.parse_token(resp.json()["token"]) == user_id

    def test_wrong_password_returns_401(self, api_client):
        client, _ = api_client
        _register(client, "login-wrong@gatekeeper.io")
        resp = _login(client, "login-wrong@gatekeeper.io", "wrong")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_credentials"

    def test_unknown_email_matches_wrong_password(self, api_client):
        client, _ = api_client
        _register(client, "login-same@gatekeeper.io")
        unknown = _login(client, "nobody@gatekeeper.io", "anything")
        wrong = _login(client, "login-same@gatekeeper.io", "anything")
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json()

    def test_multibyte_password_over_72_bytes_returns_422(self, api_client):
        client, _ = api_client
        resp = _login(client, "login-multibyte@gatekeeper.io", "\u00e9" * 40)
        assert resp.status_code == 422


class TestMeRoute:
    def test_me_with_valid_token(self, api_client):
        client, _ = api_client
        user_id = _register(client, "me-ok@gatekeeper.io").json()["id"]
        token = _login(client, "me-ok@gatekeeper.io").json()["token"]
        resp = client.get("/api/v1/auth/me", headers=_bearer(token))
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"id": user_id, "email": "me-ok@gatekeeper.io"}

    def test_me_without_header_returns_401(self, api_client):
        client, _ = api_client
        resp = client.get("/api/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "unauthorized"

    def test_me_with_other_scheme_returns_401(self, api_client):
        client, _ = api_client
        resp = client.get("/api/v1/auth/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert resp.status_code == 401

    def test_me_with_empty_bearer_returns_401(self, api_client):
        client, _ = api_client
        resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer "})
        assert resp.status_code == 401

    def test_me_with_garbage_token_returns_401(self, api_client):
        client, _ = api_client
        resp = client.get("/api/v1/auth/me", headers=_bearer("not.a.token"))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_credentials"

    def test_me_with_expired_token_returns_401(self, api_client):
        client, service = api_client
        user_id = _register(client, "me-expired@gatekeeper.io").json()["id"]
        user = User(id=user_id, email="me-expired@gatekeeper.io", password_hash="x")
        stale = service.issue_token(user, now=datetime.now(timezone.utc) - timedelta(days=2))
        resp = client.get("/api/v1/auth/me", headers=_bearer(stale))
        assert resp.status_code == 401

    def test_me_with_foreign_key_token_returns_401(self, api_client):
        client, service = api_client
        user_id = _register(client, "me-foreign@gatekeeper.io").json()["id"]
        forger = AuthService(service.store, AuthConfig(secret_key="attacker-controlled"))
        token = forger.issue_token(User(id=user_id, email="me-foreign@gatekeeper.io", password_hash="x"))
        resp = client.get("/api/v1/auth/me", headers=_bearer(token))
        assert resp.status_code == 401

    def test_me_for_unknown_user_returns_404(self, api_client):
        client, service = api_client
        token = service.issue_token(User(id=987654, email="ghost@gatekeeper.io", password_hash="x"))
        resp = client.get("/api/v1/auth/me", headers=_bearer(token))
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "not_found"

    def test_me_with_oversized_subject_returns_401(self, api_client):
        client, service = api_client
        exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
        token = jwt.encode({"sub": 10**30, "exp": exp}, service.config.secret_key, algorithm="HS256")
        resp = client.get("/api/v1/auth/me", headers=_bearer(token))
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "invalid_credentials"

    def test_me_with_out_of_range_expiry_returns_401(self, api_client):
        client, service = api_client
        token = jwt.encode({"sub": 1, "exp": 10**20}, service.config.secret_key, algorithm="HS256")
        resp = client.get("/api/v1/auth/me", headers=_bearer(token))
        assert resp.status_code == 401
