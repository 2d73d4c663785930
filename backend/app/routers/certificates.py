"""Certificate routes."""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, status

from app.dependencies import ClientInfo, get_actor, get_certificate_service, get_client_info
from app.schemas.certificate import (
    CertificateIssue,
    CertificateOut,
    CertificateStats,
    EventCertificates,
    EventCertificateStats,
)
from app.schemas.common import Envelope, Listing, Page, listing, paginate
from app.services.authorization import Actor
from app.services.certificate_service import CertificateService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/issue/{registration_id}", response_model=Envelope[CertificateOut], status_code=status.HTTP_201_CREATED)
def issue_certificate(
    registration_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
    client: ClientInfo = Depends(get_client_info),
):
    """Issue the certificate for a registration. A second issue is rejected."""
    certificate = service.issue(registration_id, actor, client.ip, client.device)
    return {"message": "Certificate issued", "data": certificate}


@router.post("/", response_model=Envelope[CertificateOut], status_code=status.HTTP_201_CREATED)
def issue_certificate_from_body(
    payload: CertificateIssue,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    """Issue by ``registration_id`` in the body. Not written to the access log."""
    certificate = service.issue(payload.registration_id, actor, record_access=False)
    return {"message": "Certificate issued", "data": certificate}


@router.get("/", response_model=Envelope[Page[CertificateOut]])
def list_certificates(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    certificates, total = service.list_all(actor, page, limit)
    return {"data": paginate(certificates, page, limit, total)}


@router.get("/mine", response_model=Envelope[Listing[CertificateOut]])
def my_certificates(actor: Actor = Depends(get_actor), service: CertificateService = Depends(get_certificate_service)):
    return {"data": listing(service.list_mine(actor))}


@router.get("/period", response_model=Envelope[Listing[CertificateOut]])
def certificates_by_period(
    start: datetime = Query(...),
    end: datetime = Query(...),
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    return {"data": listing(service.list_by_period(actor, start, end))}


@router.get("/stats", response_model=Envelope[CertificateStats])
def certificate_statistics(
    actor: Actor = Depends(get_actor), service: CertificateService = Depends(get_certificate_service)
):
    return {"data": service.statistics(actor)}


@router.get("/stats/event/{event_id}", response_model=Envelope[EventCertificateStats])
def event_certificate_statistics(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    return {"data": service.event_statistics(event_id, actor)}


@router.get("/event/{event_id}", response_model=Envelope[EventCertificates])
def certificates_for_event(
    event_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    event, certificates = service.list_by_event(event_id, actor)
    return {"data": {"event": {"id": event.id, "title": event.title}, **listing(certificates)}}


@router.get("/registration/{registration_id}", response_model=Envelope[CertificateOut])
def certificate_for_registration(
    registration_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    return {"data": service.get_by_registration(registration_id, actor)}


@router.get("/view/{certificate_id}", response_model=Envelope[CertificateOut])
def view_certificate(
    certificate_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
    client: ClientInfo = Depends(get_client_info),
):
    """Fetch a certificate and record the access."""
    return {"data": service.view(certificate_id, actor, client.ip, client.device)}


@router.get("/{certificate_id}", response_model=Envelope[CertificateOut])
def get_certificate(
    certificate_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    return {"data": service.get(certificate_id, actor)}


@router.delete("/{certificate_id}", response_model=Envelope[None])
def delete_certificate(
    certificate_id: int,
    actor: Actor = Depends(get_actor),
    service: CertificateService = Depends(get_certificate_service),
):
    service.remove(certificate_id, actor)
    return {"message": "Certificate removed"}
