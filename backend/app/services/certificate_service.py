"""Certificate issuance.

At most one certificate exists per registration. A second ``issue`` for the
same registration is an error, not a no-op; the unique constraint on
``certificates.registration_id`` settles concurrent attempts.
"""
import logging
from datetime import datetime
from typing import Optional

from app.errors import ConflictError, InvalidInputError, NotFoundError
from app.models.certificate import Certificate
from app.models.event import Event
from app.models.registration import Registration, RegistrationStatus
from app.services.audit_recorder import AuditRecorder
from app.services.authorization import (
    ORGANIZER_OR_ADMIN,
    Actor,
    can_manage_own,
    can_read_own,
    passes_role_gate,
    require,
)
from app.stores.interfaces import CertificateStore, DuplicateError, EventStore, RegistrationStore
from app.timeutil import to_utc, utcnow

logger = logging.getLogger(__name__)


class CertificateService:

    def __init__(
        self,
        certificates: CertificateStore,
        registrations: RegistrationStore,
        events: EventStore,
        recorder: AuditRecorder,
    ) -> None:
        self._certificates = certificates
        self._registrations = registrations
        self._events = events
        self._recorder = recorder

    def _get_certificate(self, certificate_id: int) -> Certificate:
        certificate = self._certificates.get(certificate_id)
        if not certificate:
            raise NotFoundError("Certificate not found")
        return certificate

    @staticmethod
    def _organizer_id(certificate: Certificate) -> Optional[int]:
        return certificate.registration.event.organizer_id

    def _require_readable(self, certificate: Certificate, actor: Actor) -> None:
        require(
            can_read_own(actor, certificate.user_id)
            or can_manage_own(actor, self._organizer_id(certificate)),
            "You are not allowed to view this certificate",
        )

    def issue(
        self,
        registration_id: int,
        actor: Actor,
        ip: Optional[str] = None,
        device: Optional[str] = None,
        record_access: bool = True,
    ) -> Certificate:
        """Issue the certificate for a registration.

        Raises:
            NotFoundError: The registration does not exist.
            ForbiddenError: The caller does not manage the registration's event.
            ConflictError: A certificate was already issued for it.
        """
        registration: Optional[Registration] = self._registrations.get(registration_id)
        if not registration:
            raise NotFoundError("Registration not found")
        require(
            can_manage_own(actor, registration.event.organizer_id),
            "Only the event organizer can issue certificates",
        )

        if self._certificates.get_by_registration(registration_id):
            raise ConflictError("Certificate already issued for this registration")

        try:
            certificate = self._certificates.create(registration_id, utcnow())
        except DuplicateError:
            raise ConflictError("Certificate already issued for this registration")

        logger.info("Certificate %s issued for registration %s by user %s",
                    certificate.id, registration_id, actor.id)
        if record_access:
            self._recorder.record_certificate(registration.user_id, registration.event_id, ip, device)
        return certificate

    def remove(self, certificate_id: int, actor: Actor) -> None:
        certificate = self._get_certificate(certificate_id)
        require(
            can_manage_own(actor, self._organizer_id(certificate)),
            "Only the event organizer can remove certificates",
        )
        self._certificates.delete(certificate)
        logger.info("Certificate %s removed by user %s", certificate_id, actor.id)

    def get(self, certificate_id: int, actor: Actor) -> Certificate:
        certificate = self._get_certificate(certificate_id)
        self._require_readable(certificate, actor)
        return certificate

    def view(
        self,
        certificate_id: int,
        actor: Actor,
        ip: Optional[str] = None,
        device: Optional[str] = None,
    ) -> Certificate:
        """Same as ``get`` but records the access."""
        certificate = self.get(certificate_id, actor)
        self._recorder.record_certificate(certificate.user_id, certificate.event_id, ip, device)
        return certificate

    def get_by_registration(self, registration_id: int, actor: Actor) -> Certificate:
        certificate = self._certificates.get_by_registration(registration_id)
        if not certificate:
            raise NotFoundError("Certificate not found for this registration")
        self._require_readable(certificate, actor)
        return certificate

    def list_all(self, actor: Actor, page: int, limit: int) -> tuple[list[Certificate], int]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        offset = (page - 1) * limit
        return self._certificates.list_page(limit, offset), self._certificates.count()

    def list_mine(self, actor: Actor) -> list[Certificate]:
        return self._certificates.list_by_user(actor.id)

    def list_by_event(self, event_id: int, actor: Actor) -> tuple[Event, list[Certificate]]:
        event = self._events.get(event_id)
        if not event:
            raise NotFoundError("Event not found")
        require(
            can_manage_own(actor, event.organizer_id),
            "You are not allowed to view certificates for this event",
        )
        return event, self._certificates.list_by_event(event_id)

    def list_by_period(self, actor: Actor, start: datetime, end: datetime) -> list[Certificate]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidInputError("End date must be after start date")
        return self._certificates.list_by_period(start, end)

    def statistics(self, actor: Actor) -> dict:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        return {
            "total_certificates": self._certificates.count(),
            "my_certificates": self._certificates.count(user_id=actor.id),
        }

    def event_statistics(self, event_id: int, actor: Actor) -> dict:
        event, certificates = self.list_by_event(event_id, actor)
        return {
            "event": {"id": event.id, "title": event.title},
            "total_certificates": len(certificates),
            "approved_registrations": len(
                self._registrations.list_by_event(event_id, RegistrationStatus.approved)
            ),
            "certificates": certificates,
        }
