"""Certificate ORM model."""
from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # unique: a second certificate for the same registration fails at the database
    registration_id = Column(
        Integer, ForeignKey("registrations.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    issued_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    registration = relationship("Registration", back_populates="certificate")

    @property
    def user_id(self):
        return self.registration.user_id if self.registration else None

    @property
    def event_id(self):
        return self.registration.event_id if self.registration else None

    @property
    def user_name(self):
        return self.registration.user_name if self.registration else None

    @property
    def event_title(self):
        return self.registration.event_title if self.registration else None

    @property
    def event_datetime(self):
        return self.registration.event_datetime if self.registration else None
