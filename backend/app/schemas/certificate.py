"""Pydantic schemas for Certificates."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.event import EventRef


class CertificateIssue(BaseModel):
    registration_id: int = Field(ge=1)


class CertificateOut(BaseModel):
    id: int
    registration_id: int
    issued_at: datetime
    user_id: Optional[int] = None
    event_id: Optional[int] = None
    user_name: Optional[str] = None
    event_title: Optional[str] = None
    event_datetime: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventCertificates(BaseModel):
    event: EventRef
    items: list[CertificateOut]
    total: int


class CertificateStats(BaseModel):
    total_certificates: int
    my_certificates: int


class EventCertificateStats(BaseModel):
    event: EventRef
    total_certificates: int
    approved_registrations: int
    certificates: list[CertificateOut]
