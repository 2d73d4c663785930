"""Registration ORM model."""
import enum
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum, select
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, column_property
from app.database import Base


class RegistrationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Registration(Base):
    __tablename__ = "registrations"
    # the store-level guard against concurrent duplicate registrations
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        SAEnum(RegistrationStatus, name="registration_status"),
        nullable=False,
        default=RegistrationStatus.pending,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="registrations")
    event = relationship("Event", back_populates="registrations")
    certificate = relationship(
        "Certificate", back_populates="registration", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def user_name(self):
        return self.user.name if self.user else None

    @property
    def user_email(self):
        return self.user.email if self.user else None

    @property
    def event_title(self):
        return self.event.title if self.event else None

    @property
    def event_datetime(self):
        return self.event.event_datetime if self.event else None


# Listings show how many registrations each event has.
from app.models.event import Event  # noqa: E402

Event.registration_count = column_property(
    select(func.count(Registration.id))
    .where(Registration.event_id == Event.id)
    .correlate_except(Registration)
    .scalar_subquery()
)
