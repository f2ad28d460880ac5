from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from app.models.donation import Donation, DonationStatus
from app.models.goal import DonationGoal
from app.schemas.donation import DonationCreate

def create_donation(db: Session, donation_in: DonationCreate) -> Donation:
    """Records a donation and credits its goal when it is completed.

    Args:
        db (Session): The SQLAlchemy database session.
        donation_in (DonationCreate): The data for the new donation.

    Returns:
        Donation: The newly created Donation object.
    """
    data = donation_in.model_dump(exclude_none=True)
    donation = Donation(**data)
    db.add(donation)
    if donation.goal_id is not None and donation.status == DonationStatus.COMPLETED:
        goal = db.query(DonationGoal).filter(DonationGoal.id == donation.goal_id).first()
        if goal is not None:
            goal.current_amount = (goal.current_amount or 0.0) + donation.amount
    db.commit(); db.refresh(donation)
    return donation

def get_donations(
    db: Session,
    skip: int = 0, limit: int = 50,
    status: Optional[DonationStatus] = None,
    start: Optional[datetime] = None, end: Optional[datetime] = None,
) -> List[Donation]:
    """Retrieves donations, newest first, with optional filtering.

    Args:
        db (Session): The SQLAlchemy database session.
        skip (int): Number of records to skip for pagination.
        limit (int): Maximum number of records to return; 0 returns all.
        status (Optional[DonationStatus]): Only donations with this status.
        start (Optional[datetime]): Inclusive lower bound on ``created_at``.
        end (Optional[datetime]): Exclusive upper bound on ``created_at``.

    Returns:
        List[Donation]: A list of Donation objects.
    """
    q = db.query(Donation)
    if status:
        q = q.filter(Donation.status == status)
    if start:
        q = q.filter(Donation.created_at >= start)
    if end:
        q = q.filter(Donation.created_at < end)
    q = q.order_by(Donation.created_at.desc()).offset(skip)
    if limit:
        q = q.limit(limit)
    return q.all()

def get_completed_amounts(
    db: Session, start: datetime, end: datetime, currency: Optional[str] = None
) -> List[tuple]:
    """Returns ``(created_at, amount)`` rows of completed donations in ``[start, end)``."""
    q = db.query(Donation.created_at, Donation.amount).filter(
        Donation.status == DonationStatus.COMPLETED,
        Donation.created_at >= start,
        Donation.created_at < end,
    )
    if currency:
        q = q.filter(Donation.currency == currency.upper())
    return q.all()

def count_recurring_donors(db: Session) -> int:
    return (
        db.query(Donation.donor_email)
        .filter(Donation.is_recurring.is_(True), Donation.donor_email.isnot(None))
        .distinct()
        .count()
    )

def sum_completed(
    db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None, goal_id: Optional[int] = None
) -> float:
    """Total of completed donations in ``[start, end)``, optionally for one goal."""
    q = db.query(func.coalesce(func.sum(Donation.amount), 0.0)).filter(Donation.status == DonationStatus.COMPLETED)
    if start:
        q = q.filter(Donation.created_at >= start)
    if end:
        q = q.filter(Donation.created_at < end)
    if goal_id is not None:
        q = q.filter(Donation.goal_id == goal_id)
    return float(q.scalar() or 0.0)

def get_recent_goal_donations(db: Session, goal_id: int, since: datetime, limit: int = 5) -> List[Donation]:
    return (
        db.query(Donation)
        .filter(
            Donation.goal_id == goal_id,
            Donation.status == DonationStatus.COMPLETED,
            Donation.created_at >= since,
        )
        .order_by(Donation.created_at.desc())
        .limit(limit)
        .all()
    )
