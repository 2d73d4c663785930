"""SQLAlchemy implementations of the relational stores.

Every mutating method commits on its own; the unique constraints on
registrations and certificates surface as DuplicateError.
"""
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.models.user import User, UserRole
from app.models.category import Category
from app.models.event import Event
from app.models.registration import Registration, RegistrationStatus
from app.models.certificate import Certificate
from app.stores.interfaces import (
    CategoryStore,
    CertificateStore,
    DuplicateError,
    EventStore,
    RegistrationStore,
    UserStore,
)

logger = logging.getLogger(__name__)


def _commit(db: Session, instance=None) -> None:
    """Commit, translating constraint violations into DuplicateError."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Integrity violation rejected: %s", exc.orig)
        raise DuplicateError(str(exc.orig)) from exc
    if instance is not None:
        db.refresh(instance)


class SqlUserStore(UserStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, user_id: int) -> Optional[User]:
        return self._db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self._db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = self._db.query(User.id).filter(func.lower(User.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def list_page(self, limit: int, offset: int) -> list[User]:
        return (
            self._db.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def list_by_role(self, role: UserRole) -> list[User]:
        return self._db.query(User).filter(User.role == role).order_by(User.name).all()

    def search(self, term: str, limit: int = 100) -> list[User]:
        pattern = f"%{term}%"
        return (
            self._db.query(User)
            .filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
            .order_by(User.name)
            .limit(limit)
            .all()
        )

    def count(self, role: Optional[UserRole] = None) -> int:
        query = self._db.query(func.count(User.id))
        if role is not None:
            query = query.filter(User.role == role)
        return query.scalar() or 0

    def names_by_ids(self, user_ids: list[int]) -> dict[int, str]:
        if not user_ids:
            return {}
        rows = self._db.query(User.id, User.name).filter(User.id.in_(user_ids)).all()
        return {row.id: row.name for row in rows}

    def create(self, name: str, email: str, password_hash: str, role: UserRole) -> User:
        user = User(name=name, email=email, password_hash=password_hash, role=role)
        self._db.add(user)
        _commit(self._db, user)
        return user

    def update(self, user: User, fields: dict[str, Any]) -> User:
        for field, value in fields.items():
            setattr(user, field, value)
        _commit(self._db, user)
        return user

    def delete(self, user: User) -> None:
        self._db.delete(user)
        _commit(self._db)


class SqlCategoryStore(CategoryStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, category_id: int) -> Optional[Category]:
        return self._db.query(Category).filter(Category.id == category_id).first()

    def name_exists(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = self._db.query(Category.id).filter(func.lower(Category.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first() is not None

    def list_all(self) -> list[Category]:
        return self._db.query(Category).order_by(Category.name.asc()).all()

    def search(self, term: str) -> list[Category]:
        return (
            self._db.query(Category)
            .filter(Category.name.ilike(f"%{term}%"))
            .order_by(Category.name.asc())
            .all()
        )

    def list_with_event_counts(self) -> list[tuple[Category, int]]:
        rows = (
            self._db.query(Category, func.count(Event.id))
            .outerjoin(Event, Event.category_id == Category.id)
            .group_by(Category.id)
            .order_by(Category.name.asc())
            .all()
        )
        return [(category, total) for category, total in rows]

    def create(self, name: str) -> Category:
        category = Category(name=name)
        self._db.add(category)
        _commit(self._db, category)
        return category

    def update(self, category: Category, name: str) -> Category:
        category.name = name
        _commit(self._db, category)
        return category

    def delete(self, category: Category) -> None:
        self._db.delete(category)
        _commit(self._db)


class SqlEventStore(EventStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def _query(self):
        return self._db.query(Event).options(joinedload(Event.organizer), joinedload(Event.category))

    def get(self, event_id: int) -> Optional[Event]:
        return self._query().filter(Event.id == event_id).first()

    def list_page(self, limit: int, offset: int = 0) -> list[Event]:
        return (
            self._query()
            .order_by(Event.event_datetime.desc(), Event.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def list_by_organizer(self, organizer_id: int) -> list[Event]:
        return (
            self._query()
            .filter(Event.organizer_id == organizer_id)
            .order_by(Event.event_datetime.desc())
            .all()
        )

    def list_with_registrations(self, limit: int) -> list[Event]:
        registered = select(Registration.event_id).distinct()
        return (
            self._query()
            .filter(Event.id.in_(registered))
            .order_by(Event.event_datetime.desc(), Event.id.desc())
            .limit(limit)
            .all()
        )

    def list_upcoming(self, now: datetime, limit: int) -> list[Event]:
        return (
            self._query()
            .filter(Event.event_datetime > now)
            .order_by(Event.event_datetime.asc())
            .limit(limit)
            .all()
        )

    def list_by_period(self, start: datetime, end: datetime) -> list[Event]:
        return (
            self._query()
            .filter(Event.event_datetime >= start, Event.event_datetime <= end)
            .order_by(Event.event_datetime.asc())
            .all()
        )

    def list_recent(self, limit: int, organizer_id: Optional[int] = None) -> list[Event]:
        query = self._query()
        if organizer_id is not None:
            query = query.filter(Event.organizer_id == organizer_id)
        return query.order_by(Event.created_at.desc(), Event.id.desc()).limit(limit).all()

    def search(self, term: str, limit: int = 100) -> list[Event]:
        pattern = f"%{term}%"
        return (
            self._query()
            .filter(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))
            .order_by(Event.event_datetime.desc())
            .limit(limit)
            .all()
        )

    def count(self, organizer_id: Optional[int] = None, after: Optional[datetime] = None) -> int:
        query = self._db.query(func.count(Event.id))
        if organizer_id is not None:
            query = query.filter(Event.organizer_id == organizer_id)
        if after is not None:
            query = query.filter(Event.event_datetime > after)
        return query.scalar() or 0

    def titles_by_ids(self, event_ids: list[int]) -> dict[int, str]:
        if not event_ids:
            return {}
        rows = self._db.query(Event.id, Event.title).filter(Event.id.in_(event_ids)).all()
        return {row.id: row.title for row in rows}

    def create(
        self,
        title: str,
        description: Optional[str],
        event_datetime: datetime,
        organizer_id: int,
        category_id: Optional[int],
    ) -> Event:
        event = Event(
            title=title,
            description=description,
            event_datetime=event_datetime,
            organizer_id=organizer_id,
            category_id=category_id,
        )
        self._db.add(event)
        _commit(self._db, event)
        return event

    def update(self, event: Event, fields: dict[str, Any]) -> Event:
        for field, value in fields.items():
            setattr(event, field, value)
        _commit(self._db, event)
        return event

    def delete(self, event: Event) -> None:
        self._db.delete(event)
        _commit(self._db)


class SqlRegistrationStore(RegistrationStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def _query(self):
        return self._db.query(Registration).options(
            joinedload(Registration.user), joinedload(Registration.event)
        )

    def get(self, registration_id: int) -> Optional[Registration]:
        return self._query().filter(Registration.id == registration_id).first()

    def find(self, user_id: int, event_id: int) -> Optional[Registration]:
        return (
            self._query()
            .filter(Registration.user_id == user_id, Registration.event_id == event_id)
            .first()
        )

    def list_page(self, limit: int, offset: int) -> list[Registration]:
        return (
            self._query()
            .order_by(Registration.created_at.desc(), Registration.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def list_by_user(self, user_id: int) -> list[Registration]:
        return (
            self._query()
            .filter(Registration.user_id == user_id)
            .order_by(Registration.created_at.desc(), Registration.id.desc())
            .all()
        )

    def list_by_event(self, event_id: int, status: Optional[RegistrationStatus] = None) -> list[Registration]:
        query = self._query().filter(Registration.event_id == event_id)
        if status is not None:
            query = query.filter(Registration.status == status)
        return query.order_by(Registration.created_at.asc(), Registration.id.asc()).all()

    def list_by_organizer(self, organizer_id: int) -> list[Registration]:
        return (
            self._query()
            .join(Event, Registration.event_id == Event.id)
            .filter(Event.organizer_id == organizer_id)
            .order_by(Registration.created_at.desc(), Registration.id.desc())
            .all()
        )

    def list_with_certificates(self, user_id: int) -> list[Registration]:
        return (
            self._query()
            .join(Certificate, Certificate.registration_id == Registration.id)
            .filter(Registration.user_id == user_id)
            .order_by(Certificate.issued_at.desc())
            .all()
        )

    def list_by_period(self, start: datetime, end: datetime) -> list[Registration]:
        return (
            self._query()
            .filter(Registration.created_at >= start, Registration.created_at <= end)
            .order_by(Registration.created_at.desc())
            .all()
        )

    def list_recent(
        self, limit: int, user_id: Optional[int] = None, organizer_id: Optional[int] = None
    ) -> list[Registration]:
        query = self._query()
        if user_id is not None:
            query = query.filter(Registration.user_id == user_id)
        if organizer_id is not None:
            query = query.join(Event, Registration.event_id == Event.id).filter(
                Event.organizer_id == organizer_id
            )
        return query.order_by(Registration.created_at.desc(), Registration.id.desc()).limit(limit).all()

    def count(
        self,
        user_id: Optional[int] = None,
        event_id: Optional[int] = None,
        organizer_id: Optional[int] = None,
    ) -> int:
        query = self._db.query(func.count(Registration.id))
        if user_id is not None:
            query = query.filter(Registration.user_id == user_id)
        if event_id is not None:
            query = query.filter(Registration.event_id == event_id)
        if organizer_id is not None:
            query = query.join(Event, Registration.event_id == Event.id).filter(
                Event.organizer_id == organizer_id
            )
        return query.scalar() or 0

    def create(self, user_id: int, event_id: int, status: RegistrationStatus) -> Registration:
        registration = Registration(user_id=user_id, event_id=event_id, status=status)
        self._db.add(registration)
        _commit(self._db, registration)
        return registration

    def set_status(self, registration: Registration, status: RegistrationStatus) -> Registration:
        registration.status = status
        _commit(self._db, registration)
        return registration

    def delete(self, registration: Registration) -> None:
        self._db.delete(registration)
        _commit(self._db)


class SqlCertificateStore(CertificateStore):

    def __init__(self, db: Session) -> None:
        self._db = db

    def _query(self):
        return self._db.query(Certificate).options(
            joinedload(Certificate.registration).joinedload(Registration.user),
            joinedload(Certificate.registration).joinedload(Registration.event),
        )

    def _joined(self):
        return self._query().join(Registration, Certificate.registration_id == Registration.id)

    def get(self, certificate_id: int) -> Optional[Certificate]:
        return self._query().filter(Certificate.id == certificate_id).first()

    def get_by_registration(self, registration_id: int) -> Optional[Certificate]:
        return self._query().filter(Certificate.registration_id == registration_id).first()

    def list_page(self, limit: int, offset: int) -> list[Certificate]:
        return (
            self._query()
            .order_by(Certificate.issued_at.desc(), Certificate.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def list_by_user(self, user_id: int) -> list[Certificate]:
        return (
            self._joined()
            .filter(Registration.user_id == user_id)
            .order_by(Certificate.issued_at.desc())
            .all()
        )

    def list_by_event(self, event_id: int) -> list[Certificate]:
        return (
            self._joined()
            .filter(Registration.event_id == event_id)
            .order_by(Certificate.issued_at.desc())
            .all()
        )

    def list_by_period(self, start: datetime, end: datetime) -> list[Certificate]:
        return (
            self._query()
            .filter(Certificate.issued_at >= start, Certificate.issued_at <= end)
            .order_by(Certificate.issued_at.desc())
            .all()
        )

    def list_recent(self, limit: int, user_id: Optional[int] = None) -> list[Certificate]:
        query = self._joined()
        if user_id is not None:
            query = query.filter(Registration.user_id == user_id)
        return query.order_by(Certificate.issued_at.desc(), Certificate.id.desc()).limit(limit).all()

    def count(
        self,
        user_id: Optional[int] = None,
        event_id: Optional[int] = None,
        organizer_id: Optional[int] = None,
    ) -> int:
        query = self._db.query(func.count(Certificate.id)).join(
            Registration, Certificate.registration_id == Registration.id
        )
        if user_id is not None:
            query = query.filter(Registration.user_id == user_id)
        if event_id is not None:
            query = query.filter(Registration.event_id == event_id)
        if organizer_id is not None:
            query = query.join(Event, Registration.event_id == Event.id).filter(
                Event.organizer_id == organizer_id
            )
        return query.scalar() or 0

    def create(self, registration_id: int, issued_at: datetime) -> Certificate:
        certificate = Certificate(registration_id=registration_id, issued_at=issued_at)
        self._db.add(certificate)
        _commit(self._db, certificate)
        return certificate

    def delete(self, certificate: Certificate) -> None:
        self._db.delete(certificate)
        _commit(self._db)
