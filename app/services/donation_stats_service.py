import logging
from datetime import datetime
from typing import Optional, Tuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import DataUnavailable
from app.crud import donation as crud_donation
from app.models.donation import DonationStatus
from app.schemas.donation import DonationStats, MonthlyDonationSummary, Timeframe
from app.services.aggregation_service import month_window, monthly_donation_totals

logger = logging.getLogger(__name__)

BY_MONTH_WINDOW = 12


def timeframe_bounds(timeframe: Timeframe, now: datetime) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Returns the ``[start, end)`` range of a timeframe, ``(None, None)`` for all time."""
    if timeframe == Timeframe.MONTH:
        period = pd.Period(now, freq="M")
    elif timeframe == Timeframe.YEAR:
        period = pd.Period(now, freq="Y")
    else:
        return None, None
    return period.start_time.to_pydatetime(), (period + 1).start_time.to_pydatetime()


def growth_rate(db: Session, now: datetime) -> float:
    """Month-over-month change of completed donations in percent, 0 without a baseline."""
    last_month, this_month = (p.value for p in monthly_donation_totals(db, months=2, now=now))
    if last_month <= 0:
        return 0.0
    return (this_month - last_month) / last_month * 100


def donations_by_month(db: Session, now: datetime):
    window = month_window(BY_MONTH_WINDOW, now)
    donations = crud_donation.get_donations(
        db,
        limit=0,
        status=DonationStatus.COMPLETED,
        start=window[0].start_time.to_pydatetime(),
        end=(window[-1] + 1).start_time.to_pydatetime(),
    )
    df = pd.DataFrame(
        [(d.created_at, d.amount, d.donor_email) for d in donations],
        columns=["created_at", "amount", "donor_email"],
    )
    if df.empty:
        amounts = pd.Series(0.0, index=window)
        donors = pd.Series(0, index=window)
    else:
        df["month"] = pd.to_datetime(df["created_at"]).dt.to_period("M")
        grouped = df.groupby("month")
        amounts = grouped["amount"].sum().reindex(window, fill_value=0.0)
        donors = grouped["donor_email"].nunique().reindex(window, fill_value=0)

    return [
        MonthlyDonationSummary(month=str(period), amount=float(amounts[period]), donors=int(donors[period]))
        for period in reversed(window)
    ]


def donation_stats(db: Session, timeframe: Timeframe = Timeframe.MONTH, now: Optional[datetime] = None) -> DonationStats:
    """Computes the headline figures of the donations dashboard.

    Args:
        db (Session): The SQLAlchemy database session.
        timeframe (Timeframe): ``month``, ``year`` or ``all``.
        now (Optional[datetime]): Reference instant, defaults to the current UTC time.

    Returns:
        DonationStats: Totals over the timeframe, month-over-month growth and
                       the last twelve months, newest first.

    Raises:
        DataUnavailable: If a donation query fails.
    """
    now = now or datetime.utcnow()
    start, end = timeframe_bounds(timeframe, now)
    try:
        donations = crud_donation.get_donations(db, limit=0, status=DonationStatus.COMPLETED, start=start, end=end)
        total_amount = sum(d.amount for d in donations)
        total_donations = len(donations)
        stats = DonationStats(
            timeframe=timeframe.value,
            total_donations=total_donations,
            total_amount=total_amount,
            average_donation=total_amount / total_donations if total_donations else 0.0,
            recurring_donors=crud_donation.count_recurring_donors(db),
            growth_rate=growth_rate(db, now),
            donations_by_month=donations_by_month(db, now),
        )
    except SQLAlchemyError as e:
        logger.error(f"Donation statistics query failed: {e}")
        raise DataUnavailable(f"Could not load donation statistics: {e}") from e
    return stats
