from datetime import datetime

from app.crud import donation as crud_donation
from app.crud import goal as crud_goal
from app.models.donation import DonationStatus
from app.schemas.donation import DonationCreate
from app.schemas.goal import GoalCreate


def make_goal(db, target=1000.0):
    return crud_goal.create_goal(db, GoalCreate(
        name="New well",
        target_amount=target,
        start_date=datetime(2026, 1, 1),
        end_date=datetime(2026, 12, 31),
    ))


def test_completed_donation_credits_its_goal(db):
    goal = make_goal(db)

    donation = crud_donation.create_donation(db, DonationCreate(amount=150.0, goal_id=goal.id))
    crud_donation.create_donation(db, DonationCreate(amount=80.0, goal_id=goal.id, status=DonationStatus.PENDING))

    db.refresh(goal)
    assert donation.id is not None
    assert donation.currency == "USD"
    assert donation.created_at is not None
    assert goal.current_amount == 150.0


def test_get_donations_filters_and_orders_newest_first(db, add_donation):
    add_donation(10.0, datetime(2026, 3, 1))
    add_donation(20.0, datetime(2026, 4, 1))
    add_donation(30.0, datetime(2026, 5, 1), status=DonationStatus.FAILED)

    completed = crud_donation.get_donations(db, status=DonationStatus.COMPLETED)
    assert [d.amount for d in completed] == [20.0, 10.0]

    april_on = crud_donation.get_donations(db, start=datetime(2026, 4, 1))
    assert [d.amount for d in april_on] == [30.0, 20.0]

    page = crud_donation.get_donations(db, skip=1, limit=1)
    assert [d.amount for d in page] == [20.0]


def test_sum_completed(db, add_donation):
    add_donation(10.0, datetime(2026, 3, 1))
    add_donation(15.5, datetime(2026, 3, 20))
    add_donation(99.0, datetime(2026, 3, 21), status=DonationStatus.REFUNDED)

    assert crud_donation.sum_completed(db) == 25.5
    assert crud_donation.sum_completed(db, start=datetime(2026, 3, 10)) == 15.5
    assert crud_donation.sum_completed(db, end=datetime(2026, 1, 1)) == 0.0


def test_recurring_donors_are_counted_once(db, add_donation):
    add_donation(10.0, datetime(2026, 3, 1), donor_email="ada@example.com", is_recurring=True)
    add_donation(10.0, datetime(2026, 4, 1), donor_email="ada@example.com", is_recurring=True)
    add_donation(10.0, datetime(2026, 4, 1), donor_email="bo@example.com", is_recurring=False)

    assert crud_donation.count_recurring_donors(db) == 1
