"""Pydantic schemas for access log entries."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.services.audit_recorder import AccessType


class AccessDetails(BaseModel):
    ip: str = "N/A"
    device: str = "N/A"
    status: str = "active"


class AccessLogOut(BaseModel):
    id: str
    user_id: int
    event_id: int
    access_type: AccessType
    timestamp: datetime
    details: AccessDetails
    user_name: Optional[str] = None
    event_title: Optional[str] = None


class AccessLogCreate(BaseModel):
    user_id: int = Field(ge=1)
    event_id: int = Field(default=0, ge=0)
    access_type: AccessType
    ip: Optional[str] = None
    device: Optional[str] = None
    status: str = "active"


class AccessLogUpdate(BaseModel):
    user_id: Optional[int] = Field(default=None, ge=1)
    event_id: Optional[int] = Field(default=None, ge=0)
    access_type: Optional[AccessType] = None
    ip: Optional[str] = None
    device: Optional[str] = None
    status: Optional[str] = None


class AccessLogStats(BaseModel):
    total: int
    registration: int
    certificate: int
    today: int
    last_7_days: int
