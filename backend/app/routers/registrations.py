"""Registration lifecycle routes."""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, status

from app.dependencies import ClientInfo, get_actor, get_client_info, get_registration_service
from app.schemas.common import Envelope, Listing, Page, listing, paginate
from app.schemas.registration import (
    EventRegistrations,
    EventRegistrationStats,
    RegistrationCreate,
    RegistrationOut,
    RegistrationStats,
    VerifyOut,
)
from app.services.authorization import Actor
from app.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=Envelope[RegistrationOut], status_code=status.HTTP_201_CREATED)
def create_registration(
    payload: RegistrationCreate,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
    client: ClientInfo = Depends(get_client_info),
):
    """Register the caller (or, for administrators, ``user_id``) for an event."""
    registration = service.create(payload.event_id, actor, payload.user_id, client.ip, client.device)
    return {"message": "Registration created", "data": registration}


@router.get("/", response_model=Envelope[Page[RegistrationOut]])
def list_registrations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    registrations, total = service.list_all(actor, page, limit)
    return {"data": paginate(registrations, page, limit, total)}


@router.get("/mine", response_model=Envelope[Listing[RegistrationOut]])
def my_registrations(
    actor: Actor = Depends(get_actor), service: RegistrationService = Depends(get_registration_service)
):
    return {"data": listing(service.list_by_user(actor))}


@router.get("/mine/certificates", response_model=Envelope[Listing[RegistrationOut]])
def my_registrations_with_certificates(
    actor: Actor = Depends(get_actor), service: RegistrationService = Depends(get_registration_service)
):
    return {"data": listing(service.list_with_certificates(actor))}


@router.get("/my-events", response_model=Envelope[Listing[RegistrationOut]])
def registrations_for_my_events(
    actor: Actor = Depends(get_actor), service: RegistrationService = Depends(get_registration_service)
):
    return {"data": listing(service.list_by_organizer(actor))}


@router.get("/period", response_model=Envelope[Listing[RegistrationOut]])
def registrations_by_period(
    start: datetime = Query(...),
    end: datetime = Query(...),
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    return {"data": listing(service.list_by_period(actor, start, end))}


@router.get("/stats", response_model=Envelope[RegistrationStats])
def registration_statistics(
    actor: Actor = Depends(get_actor), service: RegistrationService = Depends(get_registration_service)
):
    return {"data": service.statistics(actor)}


@router.get("/stats/event/{event_id}", response_model=Envelope[EventRegistrationStats])
def event_registration_statistics(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    return {"data": service.event_statistics(event_id, actor)}


@router.get("/event/{event_id}", response_model=Envelope[EventRegistrations])
def registrations_for_event(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    event, registrations = service.list_by_event(event_id, actor)
    return {"data": {"event": {"id": event.id, "title": event.title}, **listing(registrations)}}


@router.get("/event/{event_id}/pending", response_model=Envelope[EventRegistrations])
def pending_registrations_for_event(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    event, registrations = service.list_pending(event_id, actor)
    return {"data": {"event": {"id": event.id, "title": event.title}, **listing(registrations)}}


@router.get("/verify/{event_id}", response_model=Envelope[VerifyOut])
def verify_registration(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    """Tell the caller whether they are registered for the event."""
    registration = service.verify(event_id, actor)
    return {"data": {"registered": registration is not None, "registration": registration}}


@router.put("/{registration_id}/approve", response_model=Envelope[RegistrationOut])
def approve_registration(
    registration_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    return {"message": "Registration approved", "data": service.approve(registration_id, actor)}


@router.put("/{registration_id}/reject", response_model=Envelope[RegistrationOut])
def reject_registration(
    registration_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    return {"message": "Registration rejected", "data": service.reject(registration_id, actor)}


@router.delete("/cancel/{event_id}", response_model=Envelope[None])
def cancel_registration(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    service.cancel(event_id, actor)
    return {"message": "Registration cancelled"}


@router.get("/{registration_id}", response_model=Envelope[RegistrationOut])
def get_registration(
    registration_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    return {"data": service.get(registration_id, actor)}


@router.delete("/{registration_id}", response_model=Envelope[None])
def remove_registration(
    registration_id: int,
    actor: Actor = Depends(get_actor),
    service: RegistrationService = Depends(get_registration_service),
):
    service.remove(registration_id, actor)
    return {"message": "Registration removed"}
