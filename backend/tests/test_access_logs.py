"""Tests for the access log: best-effort recording and administration."""
import logging

from app.models.user import User, UserRole
from app.services.audit_recorder import AccessType, AuditRecorder
from tests.conftest import (
    DEFAULT_PASSWORD,
    auth_headers,
    create_test_event,
    create_test_user,
    register,
)


def _issue(client, organizer, registration_id):
    return client.post(f"/api/certificates/issue/{registration_id}", headers=auth_headers(organizer))


class TestRecordingIsBestEffort:
    """A down or missing access log never fails the action being audited."""

    def _exercise(self, client, db):
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        participant = create_test_user(db, "Paul Participant", email="paul@example.com")
        event = create_test_event(client, organizer)

        resp = register(client, participant, event["id"])
        assert resp.status_code == 201, resp.text

        resp = _issue(client, organizer, resp.json()["data"]["id"])
        assert resp.status_code == 201, resp.text

        resp = client.post("/api/auth/login", json={"email": "paul@example.com", "password": DEFAULT_PASSWORD})
        assert resp.status_code == 200

    def test_store_failing(self, failing_access_log, db):
        self._exercise(failing_access_log, db)

    def test_store_missing(self, missing_access_log, db):
        self._exercise(missing_access_log, db)

    def test_admin_endpoints_unavailable_when_failing(self, failing_access_log, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        resp = failing_access_log.get("/api/access-logs/", headers=auth_headers(admin))
        assert resp.status_code == 503
        assert resp.json()["success"] is False

    def test_admin_endpoints_unavailable_when_missing(self, missing_access_log, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        assert missing_access_log.get("/api/access-logs/stats", headers=auth_headers(admin)).status_code == 503

    def test_role_gate_checked_before_availability(self, missing_access_log, db):
        participant = create_test_user(db, "Paul Participant")
        assert missing_access_log.get("/api/access-logs/", headers=auth_headers(participant)).status_code == 403


class TestAccessLogAdministration:

    def test_list_enriched_newest_first(self, client, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        participant = create_test_user(db, "Paul Participant")
        event = create_test_event(client, organizer, title="Python Workshop")
        registration = register(client, participant, event["id"]).json()["data"]
        _issue(client, organizer, registration["id"])

        page = client.get("/api/access-logs/", headers=auth_headers(admin)).json()["data"]
        assert page["pagination"]["total"] == 2
        newest, oldest = page["items"]
        assert newest["access_type"] == "certificate"
        assert oldest["access_type"] == "registration"
        assert oldest["user_name"] == "Paul Participant"
        assert oldest["event_title"] == "Python Workshop"
        assert oldest["details"]["device"] == "testclient"

    def test_deleted_referents_leave_null_join(self, client, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        participant = create_test_user(db, "Paul Participant")
        event = create_test_event(client, organizer)
        register(client, participant, event["id"])

        client.delete(f"/api/events/{event['id']}", headers=auth_headers(admin))
        db.query(User).filter(User.id == participant.id).delete()
        db.commit()

        items = client.get("/api/access-logs/recent", headers=auth_headers(admin)).json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["user_id"] == participant.id
        assert items[0]["user_name"] is None
        assert items[0]["event_title"] is None

    def test_login_entries_have_no_event(self, client, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator, email="ada@example.com")
        client.post("/api/auth/login", json={"email": "ada@example.com", "password": DEFAULT_PASSWORD})
        items = client.get("/api/access-logs/recent", headers=auth_headers(admin)).json()["data"]["items"]
        assert items[0]["event_id"] == 0
        assert items[0]["user_name"] == "Ada Admin"
        assert items[0]["event_title"] is None

    def test_create_update_delete(self, client, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        participant = create_test_user(db, "Paul Participant")
        headers = auth_headers(admin)

        resp = client.post("/api/access-logs/", headers=headers, json={
            "user_id": participant.id, "event_id": 0, "access_type": "certificate", "ip": "10.0.0.1",
        })
        assert resp.status_code == 201, resp.text
        entry = resp.json()["data"]
        assert entry["details"] == {"ip": "10.0.0.1", "device": "N/A", "status": "active"}

        resp = client.put(f"/api/access-logs/{entry['id']}", headers=headers, json={"status": "archived"})
        assert resp.status_code == 200
        assert resp.json()["data"]["details"] == {"ip": "10.0.0.1", "device": "N/A", "status": "archived"}

        assert client.put(f"/api/access-logs/{entry['id']}", headers=headers, json={}).status_code == 400

        assert client.delete(f"/api/access-logs/{entry['id']}", headers=headers).status_code == 200
        assert client.get(f"/api/access-logs/{entry['id']}", headers=headers).status_code == 404

    def test_unknown_and_malformed_ids(self, client, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        headers = auth_headers(admin)
        assert client.get("/api/access-logs/not-an-object-id", headers=headers).status_code == 404
        assert client.get("/api/access-logs/5f0000000000000000000000", headers=headers).status_code == 404
        assert client.delete("/api/access-logs/not-an-object-id", headers=headers).status_code == 404

    def test_statistics(self, client, db):
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        participant = create_test_user(db, "Paul Participant")
        event = create_test_event(client, organizer)
        registration = register(client, participant, event["id"]).json()["data"]
        _issue(client, organizer, registration["id"])

        stats = client.get("/api/access-logs/stats", headers=auth_headers(admin)).json()["data"]
        assert stats == {"total": 2, "registration": 1, "certificate": 1, "today": 2, "last_7_days": 2}

    def test_non_admin_forbidden(self, client, db):
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        assert client.get("/api/access-logs/recent", headers=auth_headers(organizer)).status_code == 403


class TestRecorderLogging:

    def test_dropped_entry_names_access_type(self, caplog):
        with caplog.at_level(logging.WARNING, logger="app.services.audit_recorder"):
            AuditRecorder(None).record(7, 3, AccessType.certificate)
        assert "dropped certificate entry for user 7 event 3" in caplog.text
        assert "AccessType" not in caplog.text
