"""Administration of the access log (administrators only).

The log lives in a separate document store and references users and
events by id only. Listings join names and titles back in from the
relational store; entries whose user or event has since been deleted are
kept with a null join.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from app.errors import DependencyUnavailableError, InvalidInputError, NotFoundError
from app.services.audit_recorder import NO_EVENT, AccessType, build_entry
from app.services.authorization import ADMIN_ONLY, Actor, passes_role_gate, require
from app.stores.interfaces import AccessLogStore, EventStore, StoreUnavailableError, UserStore
from app.timeutil import to_utc, utcnow

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Access log is temporarily unavailable"


class AccessLogService:

    def __init__(self, store: Optional[AccessLogStore], users: UserStore, events: EventStore) -> None:
        self._store = store
        self._users = users
        self._events = events

    def _call(self, actor: Actor, method: str, *args, **kwargs):
        require(passes_role_gate(actor, ADMIN_ONLY), "Administrator access required")
        if self._store is None:
            raise DependencyUnavailableError(UNAVAILABLE_MESSAGE)
        try:
            return getattr(self._store, method)(*args, **kwargs)
        except StoreUnavailableError:
            raise DependencyUnavailableError(UNAVAILABLE_MESSAGE)

    def _enrich(self, entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
        user_ids = sorted({e["user_id"] for e in entries if e.get("user_id") is not None})
        event_ids = sorted({e["event_id"] for e in entries if e.get("event_id") not in (None, NO_EVENT)})
        names = self._users.names_by_ids(user_ids)
        titles = self._events.titles_by_ids(event_ids)
        for entry in entries:
            entry["user_name"] = names.get(entry.get("user_id"))
            entry["event_title"] = titles.get(entry.get("event_id"))
        return entries

    def list_enriched(self, actor: Actor, page: int, limit: int) -> tuple[list[dict[str, Any]], int]:
        entries = self._call(actor, "list_page", limit, (page - 1) * limit)
        total = self._call(actor, "count")
        return self._enrich(entries), total

    def get(self, actor: Actor, entry_id: str) -> dict[str, Any]:
        entry = self._call(actor, "get", entry_id)
        if not entry:
            raise NotFoundError("Access log entry not found")
        return self._enrich([entry])[0]

    def list_by_period(self, actor: Actor, start: datetime, end: datetime) -> list[dict[str, Any]]:
        start, end = to_utc(start), to_utc(end)
        if end <= start:
            raise InvalidInputError("End date must be after start date")
        return self._enrich(self._call(actor, "list_by_period", start, end))

    def recent(self, actor: Actor, limit: int = 10) -> list[dict[str, Any]]:
        return self._enrich(self._call(actor, "list_page", limit))

    def statistics(self, actor: Actor) -> dict[str, int]:
        now = utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return {
            "total": self._call(actor, "count"),
            "registration": self._call(actor, "count", access_type=AccessType.registration.value),
            "certificate": self._call(actor, "count", access_type=AccessType.certificate.value),
            "today": self._call(actor, "count", since=start_of_day),
            "last_7_days": self._call(actor, "count", since=now - timedelta(days=7)),
        }

    def create(
        self,
        actor: Actor,
        user_id: int,
        event_id: int,
        access_type: AccessType,
        ip: Optional[str] = None,
        device: Optional[str] = None,
        entry_status: str = "active",
    ) -> dict[str, Any]:
        document = build_entry(user_id, event_id, access_type, ip, device, entry_status)
        entry = self._call(actor, "insert", document)
        logger.info("Access log entry %s created by user %s", entry["id"], actor.id)
        return entry

    def update(self, actor: Actor, entry_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Apply a partial update; ``details`` keys are merged, not replaced."""
        changes: dict[str, Any] = {}
        for key in ("user_id", "event_id"):
            if fields.get(key) is not None:
                changes[key] = fields[key]
        if fields.get("access_type") is not None:
            changes["access_type"] = AccessType(fields["access_type"]).value
        for key in ("ip", "device", "status"):
            if fields.get(key) is not None:
                changes[f"details.{key}"] = fields[key]
        if not changes:
            raise InvalidInputError("No fields to update")

        if not self._call(actor, "update", entry_id, changes):
            raise NotFoundError("Access log entry not found")
        logger.info("Access log entry %s updated by user %s", entry_id, actor.id)
        return self.get(actor, entry_id)

    def delete(self, actor: Actor, entry_id: str) -> None:
        if not self._call(actor, "delete", entry_id):
            raise NotFoundError("Access log entry not found")
        logger.info("Access log entry %s deleted by user %s", entry_id, actor.id)
