"""Event API routes."""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_actor, get_event_service
from app.schemas.common import Envelope, Listing, Page, listing, paginate
from app.schemas.event import EventCreate, EventOut, EventStats, EventUpdate
from app.services.authorization import Actor
from app.services.event_service import EventService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Envelope[Page[EventOut]])
def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    """List events with their registration counts, latest date first."""
    events, total = service.list_page(page, limit)
    return {"data": paginate(events, page, limit, total)}


@router.get("/upcoming", response_model=Envelope[Listing[EventOut]])
def upcoming_events(
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    return {"data": listing(service.upcoming(limit))}


@router.get("/mine", response_model=Envelope[Listing[EventOut]])
def my_events(actor: Actor = Depends(get_actor), service: EventService = Depends(get_event_service)):
    return {"data": listing(service.list_mine(actor))}


@router.get("/with-registrations", response_model=Envelope[Listing[EventOut]])
def events_with_registrations(
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    return {"data": listing(service.with_registrations(actor, limit))}


@router.get("/period", response_model=Envelope[Listing[EventOut]])
def events_by_period(
    start: datetime = Query(...),
    end: datetime = Query(...),
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    return {"data": listing(service.list_by_period(start, end))}


@router.get("/search", response_model=Envelope[Listing[EventOut]])
def search_events(
    q: str = Query(""),
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    return {"data": listing(service.search(q))}


@router.get("/stats", response_model=Envelope[EventStats])
def event_statistics(actor: Actor = Depends(get_actor), service: EventService = Depends(get_event_service)):
    return {"data": service.statistics(actor)}


@router.get("/stats/mine", response_model=Envelope[EventStats])
def my_event_statistics(actor: Actor = Depends(get_actor), service: EventService = Depends(get_event_service)):
    return {"data": service.organizer_statistics(actor)}


@router.get("/{event_id}", response_model=Envelope[EventOut])
def get_event(event_id: int, actor: Actor = Depends(get_actor), service: EventService = Depends(get_event_service)):
    return {"data": service.get(event_id)}


@router.post("/", response_model=Envelope[EventOut], status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    event = service.create(
        actor,
        title=payload.title,
        event_datetime=payload.event_datetime,
        description=payload.description,
        category_id=payload.category_id,
    )
    return {"message": "Event created", "data": event}


@router.put("/{event_id}", response_model=Envelope[EventOut])
def update_event(
    event_id: int,
    payload: EventUpdate,
    actor: Actor = Depends(get_actor),
    service: EventService = Depends(get_event_service),
):
    """Partial update, owner or administrator only."""
    event = service.update(actor, event_id, payload.model_dump(exclude_unset=True))
    return {"message": "Event updated", "data": event}


@router.delete("/{event_id}", response_model=Envelope[None])
def delete_event(event_id: int, actor: Actor = Depends(get_actor), service: EventService = Depends(get_event_service)):
    """Delete an event together with its registrations and certificates."""
    service.delete(actor, event_id)
    return {"message": "Event deleted"}
