"""User administration routes (administrators only)."""
import logging
from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_actor, get_user_service
from app.models.user import UserRole
from app.schemas.common import Envelope, Listing, Page, listing, paginate
from app.schemas.user import RoleChange, UserCreate, UserOut, UserStats, UserUpdate
from app.services.authorization import Actor
from app.services.user_service import UserService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Envelope[Page[UserOut]])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    users, total = service.list_page(actor, page, limit)
    return {"data": paginate(users, page, limit, total)}


@router.get("/stats", response_model=Envelope[UserStats])
def user_statistics(actor: Actor = Depends(get_actor), service: UserService = Depends(get_user_service)):
    return {"data": service.statistics(actor)}


@router.get("/search", response_model=Envelope[Listing[UserOut]])
def search_users(
    q: str = Query(""),
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    """Match name or email; the term needs at least two characters."""
    return {"data": listing(service.search(actor, q))}


@router.get("/role/{role}", response_model=Envelope[Listing[UserOut]])
def list_users_by_role(
    role: UserRole,
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    return {"data": listing(service.list_by_role(actor, role))}


@router.get("/{user_id}", response_model=Envelope[UserOut])
def get_user(user_id: int, actor: Actor = Depends(get_actor), service: UserService = Depends(get_user_service)):
    return {"data": service.get(actor, user_id)}


@router.post("/", response_model=Envelope[UserOut], status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    user = service.create(actor, payload.name, payload.email, payload.password, payload.role)
    return {"message": "User created", "data": user}


@router.put("/{user_id}", response_model=Envelope[UserOut])
def update_user(
    user_id: int,
    payload: UserUpdate,
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    user = service.update(actor, user_id, payload.model_dump(exclude_unset=True))
    return {"message": "User updated", "data": user}


@router.put("/{user_id}/role", response_model=Envelope[UserOut])
def change_user_role(
    user_id: int,
    payload: RoleChange,
    actor: Actor = Depends(get_actor),
    service: UserService = Depends(get_user_service),
):
    user = service.change_role(actor, user_id, payload.role)
    return {"message": "Role updated", "data": user}


@router.delete("/{user_id}", response_model=Envelope[None])
def delete_user(user_id: int, actor: Actor = Depends(get_actor), service: UserService = Depends(get_user_service)):
    service.delete(actor, user_id)
    return {"message": "User deleted"}
