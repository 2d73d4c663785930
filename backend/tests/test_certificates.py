"""Tests for certificate issuance, viewing and removal."""
import pytest

from app.errors import ConflictError
from app.models.certificate import Certificate
from app.models.user import UserRole
from app.services.audit_recorder import AuditRecorder
from app.services.authorization import Actor
from app.services.certificate_service import CertificateService
from app.stores.sql_store import SqlCertificateStore, SqlEventStore, SqlRegistrationStore
from tests.conftest import auth_headers, create_test_event, create_test_user, register


def _registration(client, db):
    organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
    participant = create_test_user(db, "Paul Participant")
    event = create_test_event(client, organizer)
    reg = register(client, participant, event["id"]).json()["data"]
    return organizer, participant, event, reg


def _issue(client, user, registration_id):
    return client.post(f"/api/certificates/issue/{registration_id}", headers=auth_headers(user))


class TestIssue:
    """At most one certificate per registration; a second issue is an error."""

    def test_issue_certificate(self, client, db):
        organizer, participant, event, reg = _registration(client, db)
        resp = _issue(client, organizer, reg["id"])
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        assert data["registration_id"] == reg["id"]
        assert data["issued_at"]
        assert data["user_id"] == participant.id
        assert data["event_id"] == event["id"]

    def test_second_issue_is_conflict(self, client, db):
        organizer, _, _, reg = _registration(client, db)
        first = _issue(client, organizer, reg["id"]).json()["data"]

        resp = _issue(client, organizer, reg["id"])
        assert resp.status_code == 400
        assert resp.json()["success"] is False

        rows = db.query(Certificate).filter_by(registration_id=reg["id"]).all()
        assert len(rows) == 1
        assert rows[0].id == first["id"]

    def test_missing_registration(self, client, db):
        organizer = create_test_user(db, "Olivia Organizer", UserRole.organizer)
        assert _issue(client, organizer, 999).status_code == 404

    def test_participant_cannot_issue(self, client, db):
        _, participant, _, reg = _registration(client, db)
        assert _issue(client, participant, reg["id"]).status_code == 403
        assert db.query(Certificate).count() == 0

    def test_other_organizer_cannot_issue(self, client, db):
        _, _, _, reg = _registration(client, db)
        stranger = create_test_user(db, "Stan Stranger", UserRole.organizer)
        assert _issue(client, stranger, reg["id"]).status_code == 403

    def test_admin_can_issue(self, client, db):
        _, _, _, reg = _registration(client, db)
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        assert _issue(client, admin, reg["id"]).status_code == 201

    def test_issue_is_audited_with_registration_ids(self, client, db, access_log_collection):
        organizer, participant, event, reg = _registration(client, db)
        _issue(client, organizer, reg["id"])

        docs = list(access_log_collection.find({"access_type": "certificate"}))
        assert len(docs) == 1
        assert docs[0]["user_id"] == participant.id
        assert docs[0]["event_id"] == event["id"]


class TestReadCertificate:

    def test_get_by_owner_organizer_admin(self, client, db):
        organizer, participant, _, reg = _registration(client, db)
        admin = create_test_user(db, "Ada Admin", UserRole.administrator)
        cert = _issue(client, organizer, reg["id"]).json()["data"]

        for user in (participant, organizer, admin):
            resp = client.get(f"/api/certificates/{cert['id']}", headers=auth_headers(user))
            assert resp.status_code == 200
            assert resp.json()["data"]["user_name"] == "Paul Participant"

    def test_get_forbidden_for_others(self, client, db):
        organizer, _, _, reg = _registration(client, db)
        other = create_test_user(db, "Other Person")
        cert = _issue(client, organizer, reg["id"]).json()["data"]
        resp = client.get(f"/api/certificates/{cert['id']}", headers=auth_headers(other))
        assert resp.status_code == 403

    def test_view_records_access_but_get_does_not(self, client, db, access_log_collection):
        organizer, participant, _, reg = _registration(client, db)
        cert = _issue(client, organizer, reg["id"]).json()["data"]
        before = access_log_collection.count_documents({"access_type": "certificate"})

        client.get(f"/api/certificates/{cert['id']}", headers=auth_headers(participant))
        assert access_log_collection.count_documents({"access_type": "certificate"}) == before

        resp = client.get(f"/api/certificates/view/{cert['id']}", headers=auth_headers(participant))
        assert resp.status_code == 200
        assert access_log_collection.count_documents({"access_type": "certificate"}) == before + 1

    def test_by_registration_and_mine(self, client, db):
        organizer, participant, _, reg = _registration(client, db)
        cert = _issue(client, organizer, reg["id"]).json()["data"]
        headers = auth_headers(participant)

        resp = client.get(f"/api/certificates/registration/{reg['id']}", headers=headers)
        assert resp.json()["data"]["id"] == cert["id"]

        mine = client.get("/api/certificates/mine", headers=headers).json()["data"]
        assert mine["total"] == 1

        with_certs = client.get("/api/registrations/mine/certificates", headers=headers).json()["data"]
        assert [r["id"] for r in with_certs["items"]] == [reg["id"]]

    def test_list_by_event(self, client, db):
        organizer, _, event, reg = _registration(client, db)
        _issue(client, organizer, reg["id"])
        data = client.get(f"/api/certificates/event/{event['id']}", headers=auth_headers(organizer)).json()["data"]
        assert data["event"]["title"] == "Workshop"
        assert data["total"] == 1


class TestRemoveCertificate:

    def test_organizer_removes(self, client, db):
        organizer, _, _, reg = _registration(client, db)
        cert = _issue(client, organizer, reg["id"]).json()["data"]
        resp = client.delete(f"/api/certificates/{cert['id']}", headers=auth_headers(organizer))
        assert resp.status_code == 200
        assert db.query(Certificate).count() == 0

        # a removed certificate can be issued again
        assert _issue(client, organizer, reg["id"]).status_code == 201

    def test_participant_cannot_remove(self, client, db):
        organizer, participant, _, reg = _registration(client, db)
        cert = _issue(client, organizer, reg["id"]).json()["data"]
        resp = client.delete(f"/api/certificates/{cert['id']}", headers=auth_headers(participant))
        assert resp.status_code == 403

    def test_removing_registration_removes_certificate(self, client, db):
        organizer, participant, _, reg = _registration(client, db)
        _issue(client, organizer, reg["id"])
        client.delete(f"/api/registrations/{reg['id']}", headers=auth_headers(participant))
        assert db.query(Certificate).count() == 0


class StaleCertificateStore(SqlCertificateStore):
    """Never sees an issued certificate, as when two issues race."""

    def get_by_registration(self, registration_id):
        return None


class TestIssueFromBody:

    def test_issue_by_registration_id_is_not_audited(self, client, db, access_log_collection):
        organizer, _, _, reg = _registration(client, db)
        resp = client.post("/api/certificates/", headers=auth_headers(organizer),
                           json={"registration_id": reg["id"]})
        assert resp.status_code == 201, resp.text
        assert resp.json()["data"]["registration_id"] == reg["id"]
        assert access_log_collection.count_documents({"access_type": "certificate"}) == 0

        again = client.post("/api/certificates/", headers=auth_headers(organizer),
                            json={"registration_id": reg["id"]})
        assert again.status_code == 400


class TestUniqueConstraint:
    """The database rejects a second certificate the application check missed."""

    def test_duplicate_reaches_database_and_conflicts(self, client, db):
        organizer, _, _, reg = _registration(client, db)
        service = CertificateService(
            StaleCertificateStore(db), SqlRegistrationStore(db), SqlEventStore(db), AuditRecorder(None)
        )
        actor = Actor.from_user(organizer)

        service.issue(reg["id"], actor)
        with pytest.raises(ConflictError):
            service.issue(reg["id"], actor)

        assert db.query(Certificate).filter_by(registration_id=reg["id"]).count() == 1
