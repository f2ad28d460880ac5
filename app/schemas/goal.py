from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List
from app.models.goal import GoalType

class GoalBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    target_amount: float = Field(..., gt=0)
    start_date: datetime
    end_date: datetime
    goal_type: GoalType = GoalType.CAMPAIGN
    project_id: Optional[str] = Field(None, max_length=64)

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self

class GoalCreate(GoalBase):
    """Schema for creating a donation goal. Goals start at zero raised."""
    pass

class GoalUpdate(BaseModel):
    """Schema for updating a goal, with all fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    target_amount: Optional[float] = Field(None, gt=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    project_id: Optional[str] = Field(None, max_length=64)

class Goal(GoalBase):
    """Schema for a goal retrieved from the database."""
    id: int
    current_amount: float

    class Config:
        from_attributes = True

class RecentDonation(BaseModel):
    amount: float
    date: datetime
    donor_email: Optional[str] = None

class GoalProgress(BaseModel):
    goal: Goal
    percentage_complete: float
    days_remaining: int
    projected_completion: Optional[datetime] = None
    recent_donations: List[RecentDonation]

class YearlyGoalProgress(BaseModel):
    goal: Goal
    current_amount: float
    percentage_complete: float
    expected_progress: float
    is_ahead: bool
    projected_total: float
