"""Registration lifecycle.

A registration starts ``pending`` and is moved to ``approved`` or
``rejected`` by the event's organizer or an administrator. Participants
withdraw through ``cancel`` (only before the event starts); owners and
administrators can ``remove`` a row at any time.

The existence checks below produce friendly messages; the unique
constraint on (user_id, event_id) is what actually rejects a concurrent
duplicate.
"""
import logging
from datetime import datetime
from typing import Optional

from app.errors import ConflictError, InvalidInputError, NotFoundError
from app.models.event import Event
from app.models.registration import Registration, RegistrationStatus
from app.services.audit_recorder import AuditRecorder
from app.services.authorization import (
    ORGANIZER_OR_ADMIN,
    Actor,
    can_manage_any,
    can_manage_own,
    can_read_own,
    passes_role_gate,
    require,
)
from app.stores.interfaces import DuplicateError, EventStore, RegistrationStore, UserStore
from app.timeutil import to_utc, utcnow

logger = logging.getLogger(__name__)


class RegistrationService:

    def __init__(
        self,
        registrations: RegistrationStore,
        events: EventStore,
        users: UserStore,
        recorder: AuditRecorder,
    ) -> None:
        self._registrations = registrations
        self._events = events
        self._users = users
        self._recorder = recorder

    def _get_event(self, event_id: int) -> Event:
        event = self._events.get(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _get_registration(self, registration_id: int) -> Registration:
        registration = self._registrations.get(registration_id)
        if not registration:
            raise NotFoundError("Registration not found")
        return registration

    def _require_event_manager(self, actor: Actor, event: Event, message: str) -> None:
        require(can_manage_own(actor, event.organizer_id), message)

    # -- lifecycle ---------------------------------------------------------

    def create(
        self,
        event_id: int,
        actor: Actor,
        user_id: Optional[int] = None,
        ip: Optional[str] = None,
        device: Optional[str] = None,
    ) -> Registration:
        """Register ``user_id`` (default: the caller) for an event.

        Raises:
            NotFoundError: The event or the target user does not exist.
            ForbiddenError: A non-administrator registers someone else.
            ConflictError: Already registered, or the event has started.
        """
        event = self._get_event(event_id)

        target_id = user_id if user_id is not None else actor.id
        require(
            can_read_own(actor, target_id) or can_manage_any(actor),
            "You are not allowed to register another user",
        )
        if target_id != actor.id and not self._users.get(target_id):
            raise NotFoundError("User not found")

        if self._registrations.find(target_id, event_id):
            raise ConflictError("Already registered for this event")

        if to_utc(event.event_datetime) <= utcnow():
            raise ConflictError("Cannot register for past events")

        try:
            registration = self._registrations.create(target_id, event_id, RegistrationStatus.pending)
        except DuplicateError:
            raise ConflictError("Already registered for this event")

        logger.info("User %s registered for event %s (registration %s)", target_id, event_id, registration.id)
        self._recorder.record_registration(target_id, event_id, ip, device)
        return registration

    def _set_status(self, registration_id: int, actor: Actor, new_status: RegistrationStatus) -> Registration:
        registration = self._get_registration(registration_id)
        self._require_event_manager(
            actor, registration.event, "Only the event organizer can manage its registrations"
        )
        # no guard on the current status: an organizer may correct an earlier decision
        registration = self._registrations.set_status(registration, new_status)
        logger.info("Registration %s %s by user %s", registration_id, new_status.value, actor.id)
        return registration

    def approve(self, registration_id: int, actor: Actor) -> Registration:
        return self._set_status(registration_id, actor, RegistrationStatus.approved)

    def reject(self, registration_id: int, actor: Actor) -> Registration:
        return self._set_status(registration_id, actor, RegistrationStatus.rejected)

    def cancel(self, event_id: int, actor: Actor) -> None:
        """Withdraw the caller's own registration while the event is still ahead."""
        event = self._get_event(event_id)
        registration = self._registrations.find(actor.id, event_id)
        if not registration:
            raise ConflictError("You are not registered for this event")
        if to_utc(event.event_datetime) <= utcnow():
            raise ConflictError("Cannot cancel a registration for a past event")

        self._registrations.delete(registration)
        logger.info("User %s cancelled registration for event %s", actor.id, event_id)

    def remove(self, registration_id: int, actor: Actor) -> None:
        """Delete a registration. Unlike ``cancel`` there is no date check."""
        registration = self._get_registration(registration_id)
        require(
            can_read_own(actor, registration.user_id) or can_manage_any(actor),
            "You are not allowed to remove this registration",
        )
        self._registrations.delete(registration)
        logger.info("Registration %s removed by user %s", registration_id, actor.id)

    # -- reads -------------------------------------------------------------

    def get(self, registration_id: int, actor: Actor) -> Registration:
        registration = self._get_registration(registration_id)
        require(
            can_read_own(actor, registration.user_id)
            or can_manage_own(actor, registration.event.organizer_id),
            "You are not allowed to view this registration",
        )
        return registration

    def list_all(self, actor: Actor, page: int, limit: int) -> tuple[list[Registration], int]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        offset = (page - 1) * limit
        return self._registrations.list_page(limit, offset), self._registrations.count()

    def list_by_user(self, actor: Actor) -> list[Registration]:
        return self._registrations.list_by_user(actor.id)

    def list_with_certificates(self, actor: Actor) -> list[Registration]:
        return self._registrations.list_with_certificates(actor.id)

    def list_by_organizer(self, actor: Actor) -> list[Registration]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        return self._registrations.list_by_organizer(actor.id)

    def list_by_event(self, event_id: int, actor: Actor) -> tuple[Event, list[Registration]]:
        event = self._get_event(event_id)
        self._require_event_manager(actor, event, "You are not allowed to view registrations for this event")
        return event, self._registrations.list_by_event(event_id)

    def list_pending(self, event_id: int, actor: Actor) -> tuple[Event, list[Registration]]:
        event = self._get_event(event_id)
        self._require_event_manager(actor, event, "You are not allowed to view registrations for this event")
        return event, self._registrations.list_by_event(event_id, RegistrationStatus.pending)

    def verify(self, event_id: int, actor: Actor) -> Optional[Registration]:
        """Return the caller's registration for the event, if any."""
        self._get_event(event_id)
        return self._registrations.find(actor.id, event_id)

    def list_by_period(self, actor: Actor, start: datetime, end: datetime) -> list[Registration]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidInputError("End date must be after start date")
        return self._registrations.list_by_period(start, end)

    def statistics(self, actor: Actor) -> dict:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN))
        return {
            "total_registrations": self._registrations.count(),
            "my_registrations": self._registrations.count(user_id=actor.id),
        }

    def event_statistics(self, event_id: int, actor: Actor) -> dict:
        event = self._get_event(event_id)
        self._require_event_manager(actor, event, "You are not allowed to view statistics for this event")
        registrations = self._registrations.list_by_event(event_id)
        by_status = {s.value: 0 for s in RegistrationStatus}
        for registration in registrations:
            by_status[RegistrationStatus(registration.status).value] += 1
        return {
            "event": {"id": event.id, "title": event.title},
            "total_registrations": len(registrations),
            "by_status": by_status,
            "registrations": registrations,
        }
