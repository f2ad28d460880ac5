from datetime import datetime
from sqlalchemy.orm import Session
from typing import List, Optional
from app.models.goal import DonationGoal, GoalType
from app.schemas.goal import GoalCreate, GoalUpdate

def create_goal(db: Session, goal_in: GoalCreate) -> DonationGoal:
    goal = DonationGoal(**goal_in.model_dump(), current_amount=0.0)
    db.add(goal); db.commit(); db.refresh(goal)
    return goal

def get_goal(db: Session, goal_id: int) -> Optional[DonationGoal]:
    return db.query(DonationGoal).filter(DonationGoal.id == goal_id).first()

def get_goals(db: Session, include_completed: bool = False, now: Optional[datetime] = None) -> List[DonationGoal]:
    """Lists goals ordered by end date.

    Unless ``include_completed`` is set, only goals that have not ended and
    have not reached their target are returned.
    """
    q = db.query(DonationGoal)
    if not include_completed:
        now = now or datetime.utcnow()
        q = q.filter(
            DonationGoal.end_date >= now,
            DonationGoal.current_amount < DonationGoal.target_amount,
        )
    return q.order_by(DonationGoal.end_date.asc()).all()

def get_yearly_goal(db: Session, year_start: datetime, year_end: datetime) -> Optional[DonationGoal]:
    return (
        db.query(DonationGoal)
        .filter(
            DonationGoal.goal_type == GoalType.YEARLY,
            DonationGoal.start_date >= year_start,
            DonationGoal.end_date <= year_end,
        )
        .order_by(DonationGoal.start_date.asc())
        .first()
    )

def update_goal(db: Session, goal: DonationGoal, goal_in: GoalUpdate) -> DonationGoal:
    """Applies the set fields of ``goal_in``; raises ValueError if the dates end up inverted."""
    for field, value in goal_in.model_dump(exclude_unset=True).items():
        setattr(goal, field, value)
    if goal.end_date <= goal.start_date:
        db.rollback()
        raise ValueError("end_date must be after start_date")
    db.add(goal); db.commit(); db.refresh(goal)
    return goal
