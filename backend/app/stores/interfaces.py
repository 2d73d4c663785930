"""Store interfaces (repository pattern).

Services depend on these, never on a concrete database client, so the
relational and document stores can be swapped for fakes in tests.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from app.models.user import User, UserRole
from app.models.category import Category
from app.models.event import Event
from app.models.registration import Registration, RegistrationStatus
from app.models.certificate import Certificate


class DuplicateError(Exception):
    """A uniqueness constraint rejected the write."""


class StoreUnavailableError(Exception):
    """The backing store could not be reached."""


class UserStore(ABC):

    @abstractmethod
    def get(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        ...

    @abstractmethod
    def list_page(self, limit: int, offset: int) -> list[User]:
        """Return users, newest first."""
        ...

    @abstractmethod
    def list_by_role(self, role: UserRole) -> list[User]:
        ...

    @abstractmethod
    def search(self, term: str, limit: int = 100) -> list[User]:
        """Case-insensitive match on name or email."""
        ...

    @abstractmethod
    def count(self, role: Optional[UserRole] = None) -> int:
        ...

    @abstractmethod
    def names_by_ids(self, user_ids: list[int]) -> dict[int, str]:
        ...

    @abstractmethod
    def create(self, name: str, email: str, password_hash: str, role: UserRole) -> User:
        """Insert a user. Raises DuplicateError when the email is taken."""
        ...

    @abstractmethod
    def update(self, user: User, fields: dict[str, Any]) -> User:
        """Apply ``fields``. Raises DuplicateError when the email is taken."""
        ...

    @abstractmethod
    def delete(self, user: User) -> None:
        ...


class CategoryStore(ABC):

    @abstractmethod
    def get(self, category_id: int) -> Optional[Category]:
        ...

    @abstractmethod
    def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        """Case-insensitive lookup."""
        ...

    @abstractmethod
    def list_all(self) -> list[Category]:
        ...

    @abstractmethod
    def search(self, term: str) -> list[Category]:
        ...

    @abstractmethod
    def list_with_event_counts(self) -> list[tuple[Category, int]]:
        ...

    @abstractmethod
    def create(self, name: str) -> Category:
        ...

    @abstractmethod
    def update(self, category: Category, name: str) -> Category:
        ...

    @abstractmethod
    def delete(self, category: Category) -> None:
        ...


class EventStore(ABC):

    @abstractmethod
    def get(self, event_id: int) -> Optional[Event]:
        ...

    @abstractmethod
    def list_page(self, limit: int, offset: int = 0) -> list[Event]:
        """Return events, latest event date first."""
        ...

    @abstractmethod
    def list_by_organizer(self, organizer_id: int) -> list[Event]:
        ...

    @abstractmethod
    def list_with_registrations(self, limit: int) -> list[Event]:
        """Return the latest-dated events that have at least one registration."""
        ...

    @abstractmethod
    def list_upcoming(self, now: datetime, limit: int) -> list[Event]:
        """Return events dated after ``now``, soonest first."""
        ...

    @abstractmethod
    def list_by_period(self, start: datetime, end: datetime) -> list[Event]:
        ...

    @abstractmethod
    def list_recent(self, limit: int, organizer_id: Optional[int] = None) -> list[Event]:
        """Return the most recently created events."""
        ...

    @abstractmethod
    def search(self, term: str, limit: int = 100) -> list[Event]:
        """Case-insensitive match on title or description."""
        ...

    @abstractmethod
    def count(self, organizer_id: Optional[int] = None, after: Optional[datetime] = None) -> int:
        ...

    @abstractmethod
    def titles_by_ids(self, event_ids: list[int]) -> dict[int, str]:
        ...

    @abstractmethod
    def create(
        self,
        title: str,
        description: Optional[str],
        event_datetime: datetime,
        organizer_id: int,
        category_id: Optional[int],
    ) -> Event:
        ...

    @abstractmethod
    def update(self, event: Event, fields: dict[str, Any]) -> Event:
        ...

    @abstractmethod
    def delete(self, event: Event) -> None:
        ...


class RegistrationStore(ABC):

    @abstractmethod
    def get(self, registration_id: int) -> Optional[Registration]:
        ...

    @abstractmethod
    def find(self, user_id: int, event_id: int) -> Optional[Registration]:
        ...

    @abstractmethod
    def list_page(self, limit: int, offset: int) -> list[Registration]:
        ...

    @abstractmethod
    def list_by_user(self, user_id: int) -> list[Registration]:
        ...

    @abstractmethod
    def list_by_event(self, event_id: int, status: Optional[RegistrationStatus] = None) -> list[Registration]:
        ...

    @abstractmethod
    def list_by_organizer(self, organizer_id: int) -> list[Registration]:
        """Registrations for every event the organizer owns."""
        ...

    @abstractmethod
    def list_with_certificates(self, user_id: int) -> list[Registration]:
        """The user's registrations that have a certificate."""
        ...

    @abstractmethod
    def list_by_period(self, start: datetime, end: datetime) -> list[Registration]:
        ...

    @abstractmethod
    def list_recent(
        self, limit: int, user_id: Optional[int] = None, organizer_id: Optional[int] = None
    ) -> list[Registration]:
        ...

    @abstractmethod
    def count(
        self,
        user_id: Optional[int] = None,
        event_id: Optional[int] = None,
        organizer_id: Optional[int] = None,
    ) -> int:
        ...

    @abstractmethod
    def create(self, user_id: int, event_id: int, status: RegistrationStatus) -> Registration:
        """Insert a registration. Raises DuplicateError for an existing pair."""
        ...

    @abstractmethod
    def set_status(self, registration: Registration, status: RegistrationStatus) -> Registration:
        ...

    @abstractmethod
    def delete(self, registration: Registration) -> None:
        ...


class CertificateStore(ABC):

    @abstractmethod
    def get(self, certificate_id: int) -> Optional[Certificate]:
        ...

    @abstractmethod
    def get_by_registration(self, registration_id: int) -> Optional[Certificate]:
        ...

    @abstractmethod
    def list_page(self, limit: int, offset: int) -> list[Certificate]:
        ...

    @abstractmethod
    def list_by_user(self, user_id: int) -> list[Certificate]:
        ...

    @abstractmethod
    def list_by_event(self, event_id: int) -> list[Certificate]:
        ...

    @abstractmethod
    def list_by_period(self, start: datetime, end: datetime) -> list[Certificate]:
        ...

    @abstractmethod
    def list_recent(self, limit: int, user_id: Optional[int] = None) -> list[Certificate]:
        ...

    @abstractmethod
    def count(
        self,
        user_id: Optional[int] = None,
        event_id: Optional[int] = None,
        organizer_id: Optional[int] = None,
    ) -> int:
        ...

    @abstractmethod
    def create(self, registration_id: int, issued_at: datetime) -> Certificate:
        """Insert a certificate. Raises DuplicateError if one exists for the registration."""
        ...

    @abstractmethod
    def delete(self, certificate: Certificate) -> None:
        ...


class AccessLogStore(ABC):
    """Append-only access log kept outside the relational store.

    Documents are plain dicts; ``id`` is the stringified document key.
    """

    @abstractmethod
    def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def list_page(self, limit: int, skip: int = 0) -> list[dict[str, Any]]:
        """Return entries, newest first."""
        ...

    @abstractmethod
    def list_by_period(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    def get(self, entry_id: str) -> Optional[dict[str, Any]]:
        ...

    @abstractmethod
    def count(self, access_type: Optional[str] = None, since: Optional[datetime] = None) -> int:
        ...

    @abstractmethod
    def update(self, entry_id: str, fields: dict[str, Any]) -> bool:
        ...

    @abstractmethod
    def delete(self, entry_id: str) -> bool:
        ...
