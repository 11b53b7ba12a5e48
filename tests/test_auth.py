"""
Auth tests.

Tests cover:
  - Password hashing (bcrypt)
  - JWT pair generation / decoding / type checks
  - Login, refresh, check, logout, change-password, register
  - Authorization gate: missing / bad / revoked tokens
"""

import jwt as pyjwt
import pytest

from lencondb.models import db
from lencondb.models.user import User
from lencondb.services import jwt_service
from lencondb.utils.crypto import hash_password, verify_password

DEFAULT_PASSWORD = "secret-pass-1"  # make_user default


def _login(client, email, password=DEFAULT_PASSWORD):
    return client.post("/api/v1/auth/login", json={"email": email, "password": password})


# ═══════════════════════════════════════════════════════════════
# Crypto & tokens
# ═══════════════════════════════════════════════════════════════


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", rounds=4)
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_verify_garbage_hash(self):
        assert not verify_password("anything", "not-a-bcrypt-hash")


class TestJwtService:
    def test_pair_carries_identity_and_version(self, employee):
        pair = jwt_service.generate_token_pair(employee)
        assert pair["token_type"] == "Bearer"
        assert pair["expires_in"] == 900

        payload = jwt_service.decode_access_token(pair["access_token"])
        assert payload["sub"] == employee.id
        assert payload["role"] == "Employee"
        assert payload["token_version"] == 0
        assert payload["type"] == "access"

    def test_refresh_token_is_not_an_access_token(self, employee):
        pair = jwt_service.generate_token_pair(employee)
        with pytest.raises(pyjwt.InvalidTokenError):
            jwt_service.decode_access_token(pair["refresh_token"])
        assert jwt_service.decode_refresh_token(pair["refresh_token"])["sub"] == employee.id

    def test_tokens_are_unique(self, employee):
        a = jwt_service.generate_access_token(employee)
        b = jwt_service.generate_access_token(employee)
        assert a != b


# ═══════════════════════════════════════════════════════════════
# Login / refresh
# ═══════════════════════════════════════════════════════════════


class TestLogin:
    def test_login_success(self, client, employee):
        res = _login(client, employee.email)
        assert res.status_code == 200
        data = res.get_json()
        assert data["user"]["email"] == employee.email
        assert "password_hash" not in data["user"]
        assert data["access_token"] and data["refresh_token"]

    def test_login_wrong_password(self, client, employee):
        res = _login(client, employee.email, "not-the-password")
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid email or password"

    def test_login_unknown_email_same_message(self, client):
        res = _login(client, "nobody@example.com")
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid email or password"

    def test_login_short_password_is_400(self, client, employee):
        res = _login(client, employee.email, "short")
        assert res.status_code == 400

    def test_login_non_string_credentials(self, client, employee):
        res = client.post("/api/v1/auth/login", json={"email": employee.email, "password": 12345678})
        assert res.status_code == 400
        res = client.post("/api/v1/auth/login", json={"email": 42, "password": "secret-pass-1"})
        assert res.status_code == 400

    def test_login_missing_fields(self, client):
        res = client.post("/api/v1/auth/login", json={"email": "a@example.com"})
        assert res.status_code == 400
        assert res.get_json()["details"]["missing"] == ["password"]


class TestRefresh:
    def test_refresh_returns_new_pair(self, client, employee):
        tokens = _login(client, employee.email).get_json()
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 200
        assert res.get_json()["access_token"] != tokens["access_token"]

    def test_refresh_with_access_token_rejected(self, client, employee):
        tokens = _login(client, employee.email).get_json()
        res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
        assert res.status_code == 401

    def test_refresh_after_logout_rejected(self, client, employee):
        tokens = _login(client, employee.email).get_json()
        headers = {"Authorization": f"Bearer {tokens['access_token']}"}
        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200

        res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Session has been invalidated"


# ═══════════════════════════════════════════════════════════════
# Authorization gate
# ═══════════════════════════════════════════════════════════════


class TestAuthGate:
    def test_no_token(self, client):
        res = client.get("/api/v1/project")
        assert res.status_code == 401
        assert res.get_json()["error"] == "No token provided"

    def test_malformed_token(self, client):
        res = client.get("/api/v1/project", headers={"Authorization": "Bearer not.a.jwt"})
        assert res.status_code == 401
        assert res.get_json()["error"] == "Invalid or expired token"

    def test_token_signed_with_other_secret(self, client, employee):
        forged = pyjwt.encode(
            {"sub": employee.id, "type": "access", "token_version": 0},
            "some-other-secret", algorithm="HS256",
        )
        res = client.get("/api/v1/auth/check", headers={"Authorization": f"Bearer {forged}"})
        assert res.status_code == 401

    def test_check_returns_profile(self, client, employee, auth_headers):
        res = client.get("/api/v1/auth/check", headers=auth_headers(employee))
        assert res.status_code == 200
        assert res.get_json()["user"]["id"] == employee.id

    def test_logout_revokes_access_token(self, client, employee, auth_headers):
        headers = auth_headers(employee)
        assert client.post("/api/v1/auth/logout", headers=headers).status_code == 200

        res = client.get("/api/v1/auth/check", headers=headers)
        assert res.status_code == 401
        assert res.get_json()["error"] == "Session has been invalidated"

    def test_deleted_user_token_rejected(self, client, employee, auth_headers):
        headers = auth_headers(employee)
        db.session.delete(employee)
        db.session.commit()
        assert client.get("/api/v1/auth/check", headers=headers).status_code == 401

    def test_admin_invalidates_other_sessions(self, client, admin, employee, auth_headers):
        victim_headers = auth_headers(employee)
        res = client.post(
            f"/api/v1/users/{employee.id}/invalidate-sessions", headers=auth_headers(admin),
        )
        assert res.status_code == 200
        assert res.get_json()["token_version"] == 1
        assert client.get("/api/v1/auth/check", headers=victim_headers).status_code == 401

    def test_health_needs_no_token(self, client):
        assert client.get("/api/v1/health/ready").status_code == 200


# ═══════════════════════════════════════════════════════════════
# Password change & registration
# ═══════════════════════════════════════════════════════════════


class TestChangePassword:
    def test_change_password_rotates_sessions(self, client, employee, auth_headers):
        old_headers = auth_headers(employee)
        res = client.patch(
            "/api/v1/auth/change-password",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brand-new-pass"},
            headers=old_headers,
        )
        assert res.status_code == 200
        new_access = res.get_json()["access_token"]

        assert client.get("/api/v1/auth/check", headers=old_headers).status_code == 401
        assert client.get(
            "/api/v1/auth/check", headers={"Authorization": f"Bearer {new_access}"},
        ).status_code == 200
        assert _login(client, employee.email, "brand-new-pass").status_code == 200

    def test_wrong_current_password(self, client, employee, auth_headers):
        res = client.patch(
            "/api/v1/auth/change-password",
            json={"current_password": "wrong-password", "new_password": "brand-new-pass"},
            headers=auth_headers(employee),
        )
        assert res.status_code == 401


class TestRegister:
    def _payload(self, **kw):
        data = {
            "first_name": "Ivan",
            "last_name": "Petrov",
            "email": "Ivan.Petrov@Example.com",
            "phone": "+79991234567",
            "password": "initial-pass",
            "role": "Manager",
        }
        data.update(kw)
        return data

    def test_admin_registers_user(self, client, admin, auth_headers):
        res = client.post("/api/v1/auth/register", json=self._payload(), headers=auth_headers(admin))
        assert res.status_code == 201
        data = res.get_json()
        assert data["role"] == "Manager"
        assert data["email"] == "ivan.petrov@example.com"
        assert User.query.filter_by(phone="+79991234567").count() == 1

    def test_manager_cannot_register(self, client, manager, auth_headers):
        res = client.post("/api/v1/auth/register", json=self._payload(), headers=auth_headers(manager))
        assert res.status_code == 403

    def test_duplicate_email_conflict(self, client, admin, employee, auth_headers):
        res = client.post(
            "/api/v1/auth/register",
            json=self._payload(email=employee.email),
            headers=auth_headers(admin),
        )
        assert res.status_code == 409

    def test_non_string_name(self, client, admin, auth_headers):
        res = client.post(
            "/api/v1/auth/register", json=self._payload(first_name=7), headers=auth_headers(admin),
        )
        assert res.status_code == 400

    def test_invalid_role(self, client, admin, auth_headers):
        res = client.post(
            "/api/v1/auth/register", json=self._payload(role="Boss"), headers=auth_headers(admin),
        )
        assert res.status_code == 422
