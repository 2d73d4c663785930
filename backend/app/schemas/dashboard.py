"""Pydantic schema for the dashboard figures."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel

from app.models.user import UserRole
from app.schemas.certificate import CertificateOut
from app.schemas.event import EventOut
from app.schemas.registration import RegistrationOut


class DashboardStats(BaseModel):
    role: UserRole
    total_users: Optional[int] = None
    total_events: Optional[int] = None
    total_registrations: int = 0
    total_certificates: int = 0
    recent_events: Optional[list[EventOut]] = None
    recent_registrations: list[RegistrationOut] = []
    recent_certificates: Optional[list[CertificateOut]] = None
