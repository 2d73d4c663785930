"""Authentication and profile routes."""
import logging
from fastapi import APIRouter, Depends, status

from app.dependencies import ClientInfo, get_actor, get_auth_service, get_client_info, get_current_user
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    SessionOut,
    TokenOut,
)
from app.schemas.common import Envelope
from app.schemas.user import UserOut
from app.services.auth_service import AuthService
from app.services.authorization import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=Envelope[SessionOut], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create a participant or organizer account and sign it in."""
    user, token = service.register(payload.name, payload.email, payload.password, payload.role)
    return {"message": "Account created", "data": {"user": user, "token": token}}


@router.post("/login", response_model=Envelope[SessionOut])
def login(
    payload: LoginRequest,
    service: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    user, token = service.login(payload.email, payload.password, client.ip, client.device)
    return {"message": "Login successful", "data": {"user": user, "token": token}}


@router.post("/logout", response_model=Envelope[None])
def logout(
    actor: Actor = Depends(get_actor),
    service: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    service.logout(actor, client.ip, client.device)
    return {"message": "Logout successful"}


@router.get("/profile", response_model=Envelope[UserOut])
def get_profile(actor: Actor = Depends(get_actor), service: AuthService = Depends(get_auth_service)):
    return {"data": service.profile(actor)}


@router.put("/profile", response_model=Envelope[UserOut])
def update_profile(
    payload: ProfileUpdate,
    actor: Actor = Depends(get_actor),
    service: AuthService = Depends(get_auth_service),
):
    """Update name or email. The role can only be changed by an administrator."""
    user = service.update_profile(actor, name=payload.name, email=payload.email)
    return {"message": "Profile updated", "data": user}


@router.put("/password", response_model=Envelope[None])
def change_password(
    payload: PasswordChange,
    actor: Actor = Depends(get_actor),
    service: AuthService = Depends(get_auth_service),
):
    service.change_password(actor, payload.current_password, payload.new_password)
    return {"message": "Password changed"}


@router.post("/refresh", response_model=Envelope[TokenOut])
def refresh_token(actor: Actor = Depends(get_actor), service: AuthService = Depends(get_auth_service)):
    return {"message": "Token refreshed", "data": {"token": service.refresh(actor)}}


@router.get("/verify", response_model=Envelope[UserOut])
def verify_token(user: User = Depends(get_current_user)):
    return {"message": "Token is valid", "data": user}
