import logging
from datetime import datetime
from typing import List, Optional

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DataUnavailable
from app.crud.donation import get_completed_amounts
from app.schemas.prediction import HistoricalPoint

logger = logging.getLogger(__name__)

MIN_WINDOW_MONTHS = 2


def month_window(months: int, now: Optional[datetime] = None) -> pd.PeriodIndex:
    """Returns the ``months`` calendar months ending with the month of ``now``."""
    now = now or datetime.utcnow()
    current = pd.Period(now, freq="M")
    return pd.period_range(end=current, periods=months, freq="M")


def monthly_donation_totals(
    db: Session,
    months: int = 24,
    now: Optional[datetime] = None,
    currency: Optional[str] = None,
) -> List[HistoricalPoint]:
    """Sums completed donations per calendar month over a trailing window.

    The window ends with the month containing ``now`` and is returned oldest
    first. Months without completed donations are present with a zero value.
    Amounts are summed as stored: without ``currency`` the totals mix every
    currency, no conversion is applied.

    Args:
        db (Session): The SQLAlchemy database session.
        months (int): Number of months in the window, at least 2.
        now (Optional[datetime]): Reference instant, defaults to the current UTC time.
        currency (Optional[str]): Restrict to donations in this currency.

    Returns:
        List[HistoricalPoint]: One point per month, dated at the first instant of the month.

    Raises:
        ValueError: If ``months`` is smaller than 2.
        DataUnavailable: If the donation query fails.
    """
    if months < MIN_WINDOW_MONTHS:
        raise ValueError(f"Lookback window must be at least {MIN_WINDOW_MONTHS} months, got {months}")

    window = month_window(months, now)
    start = window[0].start_time.to_pydatetime()
    end = (window[-1] + 1).start_time.to_pydatetime()

    try:
        rows = get_completed_amounts(db, start, end, currency=currency)
    except SQLAlchemyError as e:
        logger.error(f"Donation aggregation query failed: {e}")
        raise DataUnavailable(f"Could not load donations: {e}") from e

    df = pd.DataFrame(rows, columns=["created_at", "amount"])
    if df.empty:
        totals = pd.Series(0.0, index=window)
    else:
        df["created_at"] = pd.to_datetime(df["created_at"])
        df["month"] = df["created_at"].dt.to_period("M")
        totals = df.groupby("month")["amount"].sum().reindex(window, fill_value=0.0)

    return [
        HistoricalPoint(date=period.start_time.to_pydatetime(), value=float(value))
        for period, value in totals.items()
    ]
