"""Pydantic schemas for Events."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.timeutil import to_utc, utcnow


def _must_be_future(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    value = to_utc(value)
    if value <= utcnow():
        raise ValueError("Event date must be in the future")
    return value


class EventCreate(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    description: Optional[str] = None
    event_datetime: datetime
    category_id: Optional[int] = None

    @field_validator("event_datetime")
    @classmethod
    def event_in_future(cls, value: datetime) -> datetime:
        return _must_be_future(value)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    description: Optional[str] = None
    event_datetime: Optional[datetime] = None
    category_id: Optional[int] = None

    @field_validator("event_datetime")
    @classmethod
    def event_in_future(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _must_be_future(value)


class EventOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    event_datetime: datetime
    organizer_id: int
    organizer_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    registration_count: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventRef(BaseModel):
    id: int
    title: str


class EventStats(BaseModel):
    total_events: int
    upcoming_events: int
    past_events: int
    total_registrations: int
