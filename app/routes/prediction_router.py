from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.dependencies import get_current_admin
from app.core.exceptions import DataUnavailable
from app.db.session import get_db
from app.schemas.prediction import ForecastReport, HistoricalPoint
from app.services.aggregation_service import monthly_donation_totals
from app.services.prediction_service import prediction_service

router = APIRouter(prefix="/forecast", tags=["Forecast"])

@router.get(
    "/",
    response_model=ForecastReport,
    summary="Forecast completed donations for the next N months"
)
def get_forecast(
    months: int = Query(6, gt=0, le=24),
    lookback: int = Query(24, ge=2, le=120),
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Runs the linear, seasonal and ARIMA models over the donation history.

    Args:
        months (int): The number of future months to predict.
        lookback (int): The number of past months used as history.
        currency (Optional[str]): Restrict the history to one currency.
        db (Session): The database session dependency.
        current_admin: The authenticated admin dependency.

    Returns:
        ForecastReport: History, per-model predictions and the best model.

    Raises:
        HTTPException: 503 if the donation store cannot be queried.
    """
    try:
        return prediction_service.forecast(db, months=months, lookback=lookback, currency=currency)
    except DataUnavailable as e:
        raise HTTPException(503, f"Forecast error: {str(e)}")
    except ValueError as e:
        raise HTTPException(422, str(e))

@router.get("/history", response_model=List[HistoricalPoint])
def get_history(
    lookback: int = Query(24, ge=2, le=120),
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Monthly totals of completed donations, oldest first."""
    try:
        return monthly_donation_totals(db, months=lookback, currency=currency)
    except DataUnavailable as e:
        raise HTTPException(503, f"Donation data unavailable: {str(e)}")
