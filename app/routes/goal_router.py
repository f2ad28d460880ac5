from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session
from typing import List

from app.core.dependencies import get_current_admin
from app.core.exceptions import GoalNotFound
from app.crud import goal as crud_goal
from app.db.session import get_db
from app.schemas.goal import Goal, GoalCreate, GoalProgress, GoalUpdate, YearlyGoalProgress
from app.services.goal_service import goal_progress, yearly_goal_progress

router = APIRouter(prefix="/goals", tags=["Donation Goals"])

@router.post("/", response_model=Goal, status_code=status.HTTP_201_CREATED)
def create_goal(
    data: GoalCreate,
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    return crud_goal.create_goal(db, data)

@router.get("/", response_model=List[Goal])
def list_goals(
    include_completed: bool = False,
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Lists running goals by end date; ``include_completed`` lists all goals."""
    return crud_goal.get_goals(db, include_completed=include_completed)

@router.get("/yearly", response_model=YearlyGoalProgress)
def get_yearly_goal_progress(
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Progress of the current year's goal against the pro-rata expectation.

    Raises:
        HTTPException: 404 if no yearly goal covers the current year.
    """
    progress = yearly_goal_progress(db)
    if progress is None:
        raise HTTPException(404, "No yearly goal for the current year")
    return progress

@router.get("/{goal_id}", response_model=Goal)
def get_goal(
    goal_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    goal = crud_goal.get_goal(db, goal_id)
    if not goal:
        raise HTTPException(404, "Donation goal not found")
    return goal

@router.put("/{goal_id}", response_model=Goal)
def update_goal(
    data: GoalUpdate,
    goal_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    goal = crud_goal.get_goal(db, goal_id)
    if not goal:
        raise HTTPException(404, "Donation goal not found")
    try:
        return crud_goal.update_goal(db, goal, data)
    except ValueError as e:
        raise HTTPException(422, str(e))

@router.get("/{goal_id}/progress", response_model=GoalProgress)
def get_goal_progress(
    goal_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Percentage raised, days left, projected completion and recent donations."""
    try:
        return goal_progress(db, goal_id)
    except GoalNotFound:
        raise HTTPException(404, "Donation goal not found")
