"""Dashboard route."""
from fastapi import APIRouter, Depends

from app.dependencies import get_actor, get_dashboard_service
from app.schemas.common import Envelope
from app.schemas.dashboard import DashboardStats
from app.services.authorization import Actor
from app.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/stats", response_model=Envelope[DashboardStats])
def dashboard_stats(actor: Actor = Depends(get_actor), service: DashboardService = Depends(get_dashboard_service)):
    """Figures for the caller's role: totals plus the five latest items."""
    return {"data": service.stats(actor)}
