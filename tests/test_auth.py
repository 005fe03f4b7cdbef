"""
Firebase token boundary: verification, registration and the current user.
Firebase itself is never contacted; its verify call is patched.
"""

import pytest
from fastapi import HTTPException
from firebase_admin.auth import ExpiredIdTokenError, InvalidIdTokenError

from coursehub.core import security
from coursehub.models import User, UserRole
from coursehub.schemas.user_schema import TokenData


@pytest.fixture
def firebase(monkeypatch):
    """Maps token strings to decoded claims; anything else is an invalid token."""
    tokens = {}

    def verify_id_token(id_token):
        if id_token not in tokens:
            raise InvalidIdTokenError("bad token")
        return tokens[id_token]

    monkeypatch.setattr(security, "get_firebase_app", lambda: None)
    monkeypatch.setattr(security.auth, "verify_id_token", verify_id_token)
    return tokens


class TestVerifyToken:
    def test_valid_token(self, firebase):
        firebase["good"] = {"uid": "abc", "email": "ana@example.com"}
        assert security.verify_firebase_id_token("good") == TokenData(firebase_uid="abc", email="ana@example.com")

    def test_invalid_token(self, firebase):
        with pytest.raises(HTTPException) as excinfo:
            security.verify_firebase_id_token("forged")
        assert excinfo.value.status_code == 401

    def test_expired_token(self, monkeypatch):
        def expired(_):
            raise ExpiredIdTokenError("expired", cause=None)

        monkeypatch.setattr(security, "get_firebase_app", lambda: None)
        monkeypatch.setattr(security.auth, "verify_id_token", expired)
        with pytest.raises(HTTPException) as excinfo:
            security.verify_firebase_id_token("old")
        assert excinfo.value.status_code == 401
        assert "expired" in excinfo.value.detail

    def test_missing_email_claim(self, firebase):
        firebase["no-email"] = {"uid": "abc"}
        with pytest.raises(HTTPException) as excinfo:
            security.verify_firebase_id_token("no-email")
        assert excinfo.value.status_code == 401


class TestRegister:
    def test_creates_student(self, client, db, firebase):
        firebase["token"] = {"uid": "uid-new", "email": "new@example.com"}
        response = client.post("/api/v1/auth/register", json={"firebase_id_token": "token", "full_name": "New Student"})
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["email"] == "new@example.com"
        assert user["role"] == "STUDENT"

        db.expire_all()
        assert db.query(User).filter_by(firebase_uid="uid-new").one().full_name == "New Student"

    def test_duplicate_registration_conflicts(self, client, firebase):
        firebase["token"] = {"uid": "uid-new", "email": "new@example.com"}
        client.post("/api/v1/auth/register", json={"firebase_id_token": "token"})
        response = client.post("/api/v1/auth/register", json={"firebase_id_token": "token"})
        assert response.status_code == 409

    def test_invalid_token(self, client, firebase):
        response = client.post("/api/v1/auth/register", json={"firebase_id_token": "forged"})
        assert response.status_code == 401


class TestCurrentUser:
    def test_bearer_token_resolves_local_user(self, client, seed, firebase):
        user = seed.user(role=UserRole.ADMIN)
        firebase["token"] = {"uid": user.firebase_uid, "email": user.email}
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer token"})
        assert response.status_code == 200
        assert response.json()["id"] == user.id
        assert response.json()["role"] == "ADMIN"

    def test_missing_header(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_unprovisioned_user_is_forbidden(self, client, firebase):
        firebase["token"] = {"uid": "ghost", "email": "ghost@example.com"}
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer token"})
        assert response.status_code == 403

    def test_student_cannot_reach_admin_routes(self, client, seed, firebase):
        user = seed.user()
        firebase["token"] = {"uid": user.firebase_uid, "email": user.email}
        response = client.get("/api/v1/admin/students", headers={"Authorization": "Bearer token"})
        assert response.status_code == 403
