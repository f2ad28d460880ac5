import calendar
import logging
import math
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd
from sqlalchemy.orm import Session

from app.core.exceptions import GoalNotFound
from app.crud import donation as crud_donation
from app.crud import goal as crud_goal
from app.schemas.goal import Goal, GoalProgress, RecentDonation, YearlyGoalProgress

logger = logging.getLogger(__name__)

RECENT_DONATIONS = 5


def goal_progress(db: Session, goal_id: int, now: Optional[datetime] = None) -> GoalProgress:
    """Reports how far a goal is and when it will be reached at the current pace.

    The daily rate is this month's goal donations divided by the day of the
    month; if nothing came in this month, the average since the goal started
    is used. Without any rate the projected completion is None.

    Raises:
        GoalNotFound: If no goal has this id.
    """
    now = now or datetime.utcnow()
    goal = crud_goal.get_goal(db, goal_id)
    if goal is None:
        raise GoalNotFound(goal_id)

    days_remaining = max(0, math.ceil((goal.end_date - now).total_seconds() / 86400))

    month_start = pd.Period(now, freq="M").start_time.to_pydatetime()
    month_total = crud_donation.sum_completed(db, start=month_start, end=now + timedelta(seconds=1), goal_id=goal_id)
    daily_rate = month_total / now.day
    if daily_rate <= 0:
        days_active = max(1, (now - goal.start_date).days)
        daily_rate = goal.current_amount / days_active

    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        projected = now
    elif daily_rate > 0:
        projected = now + timedelta(days=math.ceil(remaining / daily_rate))
    else:
        projected = None

    since = (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()
    recent = crud_donation.get_recent_goal_donations(db, goal_id, since=since, limit=RECENT_DONATIONS)

    return GoalProgress(
        goal=Goal.model_validate(goal),
        percentage_complete=goal.current_amount / goal.target_amount * 100,
        days_remaining=days_remaining,
        projected_completion=projected,
        recent_donations=[
            RecentDonation(amount=d.amount, date=d.created_at, donor_email=d.donor_email) for d in recent
        ],
    )


def yearly_goal_progress(db: Session, now: Optional[datetime] = None) -> Optional[YearlyGoalProgress]:
    """Compares this year's completed donations with the yearly goal.

    Returns None when no yearly goal covers the current year.
    """
    now = now or datetime.utcnow()
    year_start = datetime(now.year, 1, 1)
    year_end = datetime(now.year + 1, 1, 1)

    goal = crud_goal.get_yearly_goal(db, year_start, year_end)
    if goal is None:
        logger.info(f"No yearly donation goal defined for {now.year}")
        return None

    current = crud_donation.sum_completed(db, start=year_start, end=now + timedelta(seconds=1))
    days_in_year = 366 if calendar.isleap(now.year) else 365
    days_passed = max(1, (now - year_start).days)
    percentage = current / goal.target_amount * 100
    expected = days_passed / days_in_year * 100

    return YearlyGoalProgress(
        goal=Goal.model_validate(goal),
        current_amount=current,
        percentage_complete=percentage,
        expected_progress=expected,
        is_ahead=percentage > expected,
        projected_total=current / days_passed * days_in_year,
    )
