"""Category routes."""
import logging
from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_actor, get_category_service
from app.schemas.category import CategoryIn, CategoryOut, CategoryWithCount
from app.schemas.common import Envelope, Listing, listing
from app.services.authorization import Actor
from app.services.category_service import CategoryService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Envelope[Listing[CategoryOut]])
def list_categories(actor: Actor = Depends(get_actor), service: CategoryService = Depends(get_category_service)):
    return {"data": listing(service.list_all())}


@router.get("/search", response_model=Envelope[Listing[CategoryOut]])
def search_categories(
    q: str = Query(""),
    actor: Actor = Depends(get_actor),
    service: CategoryService = Depends(get_category_service),
):
    return {"data": listing(service.search(q))}


@router.get("/with-event-counts", response_model=Envelope[Listing[CategoryWithCount]])
def categories_with_event_counts(
    actor: Actor = Depends(get_actor), service: CategoryService = Depends(get_category_service)
):
    return {"data": listing(service.list_with_event_counts(actor))}


@router.get("/{category_id}", response_model=Envelope[CategoryOut])
def get_category(
    category_id: int, actor: Actor = Depends(get_actor), service: CategoryService = Depends(get_category_service)
):
    return {"data": service.get(category_id)}


@router.post("/", response_model=Envelope[CategoryOut], status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryIn, actor: Actor = Depends(get_actor), service: CategoryService = Depends(get_category_service)
):
    return {"message": "Category created", "data": service.create(actor, payload.name)}


@router.put("/{category_id}", response_model=Envelope[CategoryOut])
def update_category(
    category_id: int,
    payload: CategoryIn,
    actor: Actor = Depends(get_actor),
    service: CategoryService = Depends(get_category_service),
):
    return {"message": "Category updated", "data": service.update(actor, category_id, payload.name)}


@router.delete("/{category_id}", response_model=Envelope[None])
def delete_category(
    category_id: int, actor: Actor = Depends(get_actor), service: CategoryService = Depends(get_category_service)
):
    """Delete a category. Its events stay, uncategorised."""
    service.delete(actor, category_id)
    return {"message": "Category deleted"}
