"""
Dashboard Routes — balance, recent activity and 30-day flow.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from neobank.database import get_db
from neobank.schemas.schemas import DashboardResponse
from neobank.services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
def get_dashboard(db: Session = Depends(get_db)):
    return DashboardService.build(db)
