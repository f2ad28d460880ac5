from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.dependencies import get_current_admin
from app.core.exceptions import DataUnavailable
from app.crud import donation as crud_donation
from app.crud import goal as crud_goal
from app.db.session import get_db
from app.models.donation import DonationStatus
from app.schemas.donation import Donation, DonationCreate, DonationStats, Timeframe
from app.services.donation_stats_service import donation_stats

router = APIRouter(prefix="/donations", tags=["Donations"])

@router.post("/", response_model=Donation, status_code=status.HTTP_201_CREATED)
def create_donation(
    data: DonationCreate,
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Records a donation, e.g. one received offline.

    Raises:
        HTTPException: 404 if the referenced donation goal does not exist.
    """
    if data.goal_id is not None and crud_goal.get_goal(db, data.goal_id) is None:
        raise HTTPException(404, "Donation goal not found")
    return crud_donation.create_donation(db, data)

@router.get("/", response_model=List[Donation])
def list_donations(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, gt=0, le=500),
    status: Optional[DonationStatus] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Lists donations, newest first, filtered by status and date range."""
    return crud_donation.get_donations(db, skip=skip, limit=limit, status=status, start=start, end=end)

@router.get("/stats", response_model=DonationStats)
def get_donation_stats(
    timeframe: Timeframe = Timeframe.MONTH,
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Totals, average, growth and monthly breakdown for the dashboard.

    Raises:
        HTTPException: 503 if the donation store cannot be queried.
    """
    try:
        return donation_stats(db, timeframe)
    except DataUnavailable as e:
        raise HTTPException(503, f"Donation data unavailable: {str(e)}")
