"""Pydantic schemas for sign-up, sign-in and profile changes."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole
from app.schemas.user import UserOut


class RegisterRequest(BaseModel):
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: UserRole = UserRole.participant


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=128)


class SessionOut(BaseModel):
    user: UserOut
    token: str


class TokenOut(BaseModel):
    token: str
