"""Pydantic schemas for Registrations."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.models.registration import RegistrationStatus
from app.schemas.event import EventRef


class RegistrationCreate(BaseModel):
    event_id: int
    # administrators may register someone else
    user_id: Optional[int] = None


class RegistrationOut(BaseModel):
    id: int
    user_id: int
    event_id: int
    status: RegistrationStatus
    created_at: Optional[datetime] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    event_title: Optional[str] = None
    event_datetime: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventRegistrations(BaseModel):
    event: EventRef
    items: list[RegistrationOut]
    total: int


class VerifyOut(BaseModel):
    registered: bool
    registration: Optional[RegistrationOut] = None


class RegistrationStats(BaseModel):
    total_registrations: int
    my_registrations: int


class EventRegistrationStats(BaseModel):
    event: EventRef
    total_registrations: int
    by_status: dict[str, int]
    registrations: list[RegistrationOut]
