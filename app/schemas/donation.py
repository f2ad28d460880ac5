from pydantic import BaseModel, Field, EmailStr, field_validator
from datetime import datetime
from typing import Optional, List
from app.models.donation import DonationStatus
import enum
import re

class DonationBase(BaseModel):
    """Base schema for a donation, containing core fields and validation."""
    amount: float = Field(..., gt=0, examples=[50.0])
    currency: str = Field("USD", examples=["USD"])
    status: DonationStatus = DonationStatus.COMPLETED
    donor_email: Optional[EmailStr] = None
    project_id: Optional[str] = Field(None, max_length=64)
    goal_id: Optional[int] = None
    is_recurring: bool = False

    @field_validator("currency")
    @classmethod
    def currency_format(cls, v):
        v = v.upper()
        if not re.match(r"^[A-Z]{3}$", v):
            raise ValueError("Invalid ISO-4217 currency code")
        return v

class DonationCreate(DonationBase):
    """Schema used for recording a donation; ``created_at`` defaults to now."""
    created_at: Optional[datetime] = None

class Donation(DonationBase):
    """Schema for a donation retrieved from the database."""
    id: int
    created_at: datetime

    class Config:
        from_attributes = True

class MonthlyDonationSummary(BaseModel):
    month: str
    amount: float
    donors: int

class DonationStats(BaseModel):
    """Summary figures for the donations dashboard."""
    timeframe: str
    total_donations: int
    total_amount: float
    average_donation: float
    recurring_donors: int
    growth_rate: float
    donations_by_month: List[MonthlyDonationSummary]

class Timeframe(str, enum.Enum):
    MONTH = "month"
    YEAR  = "year"
    ALL   = "all"
