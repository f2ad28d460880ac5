from datetime import datetime

import pytest

from app.core.exceptions import GoalNotFound
from app.crud import goal as crud_goal
from app.models.goal import GoalType
from app.schemas.goal import GoalCreate
from app.services.goal_service import goal_progress, yearly_goal_progress

NOW = datetime(2026, 10, 10, 12, 0)


def make_goal(db, **overrides):
    data = dict(
        name="School roof",
        target_amount=1000.0,
        start_date=datetime(2026, 9, 1),
        end_date=datetime(2026, 10, 20, 12, 0),
    )
    data.update(overrides)
    return crud_goal.create_goal(db, GoalCreate(**data))


def test_progress_projects_completion_from_this_months_rate(db, add_donation):
    goal = make_goal(db)
    add_donation(200.0, datetime(2026, 10, 2), goal_id=goal.id, donor_email="a@example.com")
    add_donation(300.0, datetime(2026, 10, 5), goal_id=goal.id)
    goal.current_amount = 500.0
    db.commit()

    progress = goal_progress(db, goal.id, now=NOW)

    assert progress.percentage_complete == pytest.approx(50.0)
    assert progress.days_remaining == 10
    # 500 raised over 10 days this month -> 50/day -> 10 more days
    assert progress.projected_completion == datetime(2026, 10, 20, 12, 0)
    assert [d.amount for d in progress.recent_donations] == [300.0, 200.0]


def test_progress_falls_back_to_the_rate_since_start(db):
    goal = make_goal(db)
    goal.current_amount = 390.0
    db.commit()

    progress = goal_progress(db, goal.id, now=NOW)

    # 39 days since 1 Sep at 10/day -> 61 more days
    assert progress.projected_completion == datetime(2026, 12, 10, 12, 0)
    assert progress.recent_donations == []


def test_progress_without_any_donation_has_no_projection(db):
    goal = make_goal(db)
    progress = goal_progress(db, goal.id, now=NOW)
    assert progress.projected_completion is None
    assert progress.percentage_complete == 0.0


def test_progress_of_unknown_goal(db):
    with pytest.raises(GoalNotFound):
        goal_progress(db, 404, now=NOW)


def test_list_hides_finished_goals(db):
    running = make_goal(db, name="Running")
    make_goal(db, name="Ended", start_date=datetime(2025, 1, 1), end_date=datetime(2025, 6, 1))
    reached = make_goal(db, name="Reached")
    reached.current_amount = 1000.0
    db.commit()

    assert [g.id for g in crud_goal.get_goals(db, now=NOW)] == [running.id]
    assert len(crud_goal.get_goals(db, include_completed=True)) == 3


def test_yearly_progress(db, add_donation):
    make_goal(
        db,
        name="2026",
        target_amount=40000.0,
        goal_type=GoalType.YEARLY,
        start_date=datetime(2026, 1, 1),
        end_date=datetime(2026, 12, 31, 23, 59),
    )
    add_donation(10000.0, datetime(2026, 2, 1))
    add_donation(5000.0, datetime(2025, 12, 31))

    progress = yearly_goal_progress(db, now=datetime(2026, 4, 11))

    assert progress.current_amount == 10000.0
    assert progress.percentage_complete == pytest.approx(25.0)
    assert progress.expected_progress == pytest.approx(100 / 365 * 100)
    assert not progress.is_ahead
    assert progress.projected_total == pytest.approx(10000 / 100 * 365)


def test_no_yearly_goal(db):
    assert yearly_goal_progress(db, now=NOW) is None
