"""Tests for registration, login/logout and profile endpoints."""
from datetime import timedelta

from app.models.user import UserRole
from app.security import create_access_token
from tests.conftest import DEFAULT_PASSWORD, auth_headers, create_test_user


def _register(client, **overrides):
    payload = {"name": "Paul Participant", "email": "paul@example.com", "password": "secret123"}
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


class TestRegister:

    def test_register_defaults_to_participant(self, client):
        resp = _register(client)
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        assert data["user"]["role"] == "participant"
        assert data["token"]

        me = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.json()["data"]["email"] == "paul@example.com"

    def test_register_as_organizer(self, client):
        resp = _register(client, role="organizer")
        assert resp.json()["data"]["user"]["role"] == "organizer"

    def test_cannot_self_register_administrator(self, client):
        resp = _register(client, role="administrator")
        assert resp.status_code == 400

    def test_duplicate_email(self, client):
        _register(client)
        resp = _register(client, email="PAUL@example.com")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email already in use"

    def test_validation_errors_use_envelope(self, client):
        resp = _register(client, email="not-an-email", password="x")
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        fields = {e["field"] for e in body["errors"]}
        assert {"email", "password"} <= fields


class TestLogin:

    def test_login_success_is_audited(self, client, db, access_log_collection):
        user = create_test_user(db, "Paul Participant", email="paul@example.com")
        resp = client.post("/api/auth/login", json={"email": "paul@example.com", "password": DEFAULT_PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["data"]["user"]["id"] == user.id

        doc = access_log_collection.find_one({"user_id": user.id})
        assert doc["event_id"] == 0
        assert doc["access_type"] == "registration"

    def test_wrong_password(self, client, db):
        create_test_user(db, "Paul Participant", email="paul@example.com")
        resp = client.post("/api/auth/login", json={"email": "paul@example.com", "password": "wrong-one"})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Invalid email or password"}

    def test_unknown_email(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert resp.status_code == 401

    def test_logout_is_audited(self, client, db, access_log_collection):
        user = create_test_user(db, "Paul Participant")
        resp = client.post("/api/auth/logout", headers=auth_headers(user))
        assert resp.status_code == 200
        assert access_log_collection.count_documents({"user_id": user.id, "event_id": 0}) == 1


class TestTokens:

    def test_expired_token(self, client, db):
        user = create_test_user(db, "Paul Participant")
        token = create_access_token(user.id, expires_in=timedelta(seconds=-1))
        resp = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Token expired"

    def test_token_for_deleted_user(self, client, db):
        user = create_test_user(db, "Paul Participant")
        headers = auth_headers(user)
        db.delete(user)
        db.commit()
        assert client.get("/api/auth/profile", headers=headers).status_code == 401

    def test_refresh_and_verify(self, client, db):
        user = create_test_user(db, "Paul Participant")
        token = client.post("/api/auth/refresh", headers=auth_headers(user)).json()["data"]["token"]
        resp = client.get("/api/auth/verify", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == user.id


class TestProfile:

    def test_update_profile_keeps_role(self, client, db):
        user = create_test_user(db, "Paul Participant")
        resp = client.put("/api/auth/profile", headers=auth_headers(user),
                          json={"name": "Paul P.", "role": "administrator"})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["name"] == "Paul P."
        assert data["role"] == "participant"

    def test_update_profile_email_taken(self, client, db):
        user = create_test_user(db, "Paul Participant")
        create_test_user(db, "Other Person", email="other@example.com")
        resp = client.put("/api/auth/profile", headers=auth_headers(user), json={"email": "other@example.com"})
        assert resp.status_code == 400

    def test_change_password(self, client, db):
        user = create_test_user(db, "Paul Participant", email="paul@example.com")
        headers = auth_headers(user)

        bad = client.put("/api/auth/password", headers=headers,
                         json={"current_password": "wrong", "new_password": "another123"})
        assert bad.status_code == 400

        ok = client.put("/api/auth/password", headers=headers,
                        json={"current_password": DEFAULT_PASSWORD, "new_password": "another123"})
        assert ok.status_code == 200

        login = client.post("/api/auth/login", json={"email": "paul@example.com", "password": "another123"})
        assert login.status_code == 200

    def test_organizer_profile(self, client, db):
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        resp = client.get("/api/auth/profile", headers=auth_headers(organizer))
        assert resp.json()["data"]["role"] == "organizer"
