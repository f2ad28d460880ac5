from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.session import Base
import enum

class GoalType(str, enum.Enum):
    CAMPAIGN = "campaign"
    YEARLY   = "yearly"

class DonationGoal(Base):
    """A fundraising target over a date range.

    Attributes:
        id (int): Primary key for the goal.
        name (str): Display name of the goal.
        description (str): Optional longer description.
        target_amount (float): Amount to raise.
        current_amount (float): Amount raised so far from completed donations.
        start_date (datetime): Start of the fundraising window.
        end_date (datetime): End of the fundraising window.
        goal_type (GoalType): ``campaign`` or organisation-wide ``yearly`` goal.
        project_id (str): Optional project the goal belongs to.
        donations (relationship): Donations linked to this goal.
    """
    __tablename__ = "donation_goals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, nullable=False, default=0.0)
    start_date = Column(DateTime(timezone=False), nullable=False)
    end_date = Column(DateTime(timezone=False), nullable=False)
    goal_type = Column(SAEnum(GoalType), nullable=False, default=GoalType.CAMPAIGN)
    project_id = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=False), server_default=func.now())

    donations = relationship("Donation", back_populates="goal")

    def __repr__(self):
        return f"<DonationGoal(id={self.id}, name='{self.name}', target={self.target_amount})>"
