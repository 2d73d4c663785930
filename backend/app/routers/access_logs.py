"""Access log administration routes (administrators only).

These are the only routes that depend on MongoDB; they answer 503 while it
is unreachable.
"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Query, status

from app.dependencies import get_access_log_service, get_actor
from app.schemas.access_log import AccessLogCreate, AccessLogOut, AccessLogStats, AccessLogUpdate
from app.schemas.common import Envelope, Listing, Page, listing, paginate
from app.services.access_log_service import AccessLogService
from app.services.authorization import Actor

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=Envelope[Page[AccessLogOut]])
def list_access_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: AccessLogService = Depends(get_access_log_service),
):
    """Newest entries first, with user names and event titles joined in."""
    entries, total = service.list_enriched(actor, page, limit)
    return {"data": paginate(entries, page, limit, total)}


@router.get("/period", response_model=Envelope[Listing[AccessLogOut]])
def access_logs_by_period(
    start: datetime = Query(...),
    end: datetime = Query(...),
    actor: Actor = Depends(get_actor),
    service: AccessLogService = Depends(get_access_log_service),
):
    return {"data": listing(service.list_by_period(actor, start, end))}


@router.get("/recent", response_model=Envelope[Listing[AccessLogOut]])
def recent_access_logs(
    limit: int = Query(10, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    service: AccessLogService = Depends(get_access_log_service),
):
    return {"data": listing(service.recent(actor, limit))}


@router.get("/stats", response_model=Envelope[AccessLogStats])
def access_log_statistics(
    actor: Actor = Depends(get_actor), service: AccessLogService = Depends(get_access_log_service)
):
    return {"data": service.statistics(actor)}


@router.post("/", response_model=Envelope[AccessLogOut], status_code=status.HTTP_201_CREATED)
def create_access_log(
    payload: AccessLogCreate,
    actor: Actor = Depends(get_actor),
    service: AccessLogService = Depends(get_access_log_service),
):
    entry = service.create(
        actor,
        user_id=payload.user_id,
        event_id=payload.event_id,
        access_type=payload.access_type,
        ip=payload.ip,
        device=payload.device,
        entry_status=payload.status,
    )
    return {"message": "Access log entry created", "data": entry}


@router.get("/{entry_id}", response_model=Envelope[AccessLogOut])
def get_access_log(
    entry_id: str, actor: Actor = Depends(get_actor), service: AccessLogService = Depends(get_access_log_service)
):
    return {"data": service.get(actor, entry_id)}


@router.put("/{entry_id}", response_model=Envelope[AccessLogOut])
def update_access_log(
    entry_id: str,
    payload: AccessLogUpdate,
    actor: Actor = Depends(get_actor),
    service: AccessLogService = Depends(get_access_log_service),
):
    entry = service.update(actor, entry_id, payload.model_dump(exclude_unset=True))
    return {"message": "Access log entry updated", "data": entry}


@router.delete("/{entry_id}", response_model=Envelope[None])
def delete_access_log(
    entry_id: str, actor: Actor = Depends(get_actor), service: AccessLogService = Depends(get_access_log_service)
):
    service.delete(actor, entry_id)
    return {"message": "Access log entry deleted"}
