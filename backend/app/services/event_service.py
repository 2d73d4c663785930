"""Event catalogue.

Organizers own the events they create; only the owner or an administrator
may change or delete one. ``event_datetime`` is checked to be in the future
by the request schemas before it reaches this service; here it is only
normalised to UTC.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from app.errors import InvalidInputError, NotFoundError
from app.models.event import Event
from app.services.authorization import (
    ORGANIZER_OR_ADMIN,
    Actor,
    can_manage_own,
    passes_role_gate,
    require,
)
from app.stores.interfaces import CategoryStore, EventStore, RegistrationStore
from app.timeutil import to_utc, utcnow

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
UPDATABLE_FIELDS = ("title", "description", "event_datetime", "category_id")


class EventService:

    def __init__(
        self,
        events: EventStore,
        categories: CategoryStore,
        registrations: RegistrationStore,
    ) -> None:
        self._events = events
        self._categories = categories
        self._registrations = registrations

    def _check_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and not self._categories.get(category_id):
            raise NotFoundError("Category not found")

    def get(self, event_id: int) -> Event:
        event = self._events.get(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def list_page(self, page: int, limit: int) -> tuple[list[Event], int]:
        return self._events.list_page(limit, (page - 1) * limit), self._events.count()

    def upcoming(self, limit: int = 10) -> list[Event]:
        return self._events.list_upcoming(utcnow(), limit)

    def with_registrations(self, actor: Actor, limit: int = 10) -> list[Event]:
        """Events that have at least one registration, latest first."""
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN), "Organizer access required")
        return self._events.list_with_registrations(limit)

    def list_mine(self, actor: Actor) -> list[Event]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN), "Organizer access required")
        return self._events.list_by_organizer(actor.id)

    def list_by_period(self, start: datetime, end: datetime) -> list[Event]:
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidInputError("End date must be after start date")
        return self._events.list_by_period(start, end)

    def search(self, term: Optional[str]) -> list[Event]:
        term = (term or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise InvalidInputError(f"Search term must have at least {MIN_SEARCH_LENGTH} characters")
        return self._events.search(term)

    def create(
        self,
        actor: Actor,
        title: str,
        event_datetime: datetime,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> Event:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN), "Only organizers can create events")
        self._check_category(category_id)
        event = self._events.create(
            title=title.strip(),
            description=description,
            event_datetime=to_utc(event_datetime),
            organizer_id=actor.id,
            category_id=category_id,
        )
        logger.info("Event %s '%s' created by user %s", event.id, event.title, actor.id)
        return event

    def update(self, actor: Actor, event_id: int, fields: dict[str, Any]) -> Event:
        event = self.get(event_id)
        require(can_manage_own(actor, event.organizer_id), "You are not allowed to edit this event")

        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if "title" in changes and changes["title"] is None:
            del changes["title"]
        if changes.get("event_datetime") is not None:
            changes["event_datetime"] = to_utc(changes["event_datetime"])
        elif "event_datetime" in changes:
            del changes["event_datetime"]
        if "category_id" in changes:
            self._check_category(changes["category_id"])
        if not changes:
            return event

        event = self._events.update(event, changes)
        logger.info("Event %s updated by user %s: %s", event_id, actor.id, sorted(changes))
        return event

    def delete(self, actor: Actor, event_id: int) -> None:
        event = self.get(event_id)
        require(can_manage_own(actor, event.organizer_id), "You are not allowed to delete this event")
        self._events.delete(event)
        logger.info("Event %s deleted by user %s", event_id, actor.id)

    def statistics(self, actor: Actor) -> dict[str, int]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN), "Organizer access required")
        total = self._events.count()
        upcoming = self._events.count(after=utcnow())
        return {
            "total_events": total,
            "upcoming_events": upcoming,
            "past_events": total - upcoming,
            "total_registrations": self._registrations.count(),
        }

    def organizer_statistics(self, actor: Actor) -> dict[str, int]:
        require(passes_role_gate(actor, ORGANIZER_OR_ADMIN), "Organizer access required")
        total = self._events.count(organizer_id=actor.id)
        upcoming = self._events.count(organizer_id=actor.id, after=utcnow())
        return {
            "total_events": total,
            "upcoming_events": upcoming,
            "past_events": total - upcoming,
            "total_registrations": self._registrations.count(organizer_id=actor.id),
        }
