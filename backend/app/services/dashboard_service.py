"""Role-specific dashboard figures."""
from app.models.user import UserRole
from app.services.authorization import Actor
from app.stores.interfaces import CertificateStore, EventStore, RegistrationStore, UserStore

RECENT_LIMIT = 5


class DashboardService:

    def __init__(
        self,
        users: UserStore,
        events: EventStore,
        registrations: RegistrationStore,
        certificates: CertificateStore,
    ) -> None:
        self._users = users
        self._events = events
        self._registrations = registrations
        self._certificates = certificates

    def stats(self, actor: Actor) -> dict:
        if actor.role == UserRole.administrator:
            return {
                "role": actor.role,
                "total_users": self._users.count(),
                "total_events": self._events.count(),
                "total_registrations": self._registrations.count(),
                "total_certificates": self._certificates.count(),
                "recent_events": self._events.list_recent(RECENT_LIMIT),
                "recent_registrations": self._registrations.list_recent(RECENT_LIMIT),
            }
        if actor.role == UserRole.organizer:
            return {
                "role": actor.role,
                "total_events": self._events.count(organizer_id=actor.id),
                "total_registrations": self._registrations.count(organizer_id=actor.id),
                "total_certificates": self._certificates.count(organizer_id=actor.id),
                "recent_events": self._events.list_recent(RECENT_LIMIT, organizer_id=actor.id),
                "recent_registrations": self._registrations.list_recent(RECENT_LIMIT, organizer_id=actor.id),
            }
        return {
            "role": actor.role,
            "total_registrations": self._registrations.count(user_id=actor.id),
            "total_certificates": self._certificates.count(user_id=actor.id),
            "recent_registrations": self._registrations.list_recent(RECENT_LIMIT, user_id=actor.id),
            "recent_certificates": self._certificates.list_recent(RECENT_LIMIT, user_id=actor.id),
        }
