from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Enum as SAEnum
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.session import Base
import enum

class DonationStatus(str, enum.Enum):
    PENDING   = "pending"
    COMPLETED = "completed"
    FAILED    = "failed"
    REFUNDED  = "refunded"

class Donation(Base):
    """A single donation as persisted after checkout.

    Payment gateways write these rows; this service only reads them for
    analytics, plus the back-office endpoint that records manual donations.
    Only ``completed`` donations count towards totals and forecasts.

    Attributes:
        id (int): Primary key for the donation.
        amount (float): Donated amount in ``currency`` units.
        currency (str): ISO-4217 currency code, e.g. "USD".
        status (DonationStatus): Payment status of the donation.
        donor_email (str): E-mail of the donor, if known.
        project_id (str): Identifier of the project the donation supports.
        goal_id (int): Optional foreign key to the donation goal it counts towards.
        is_recurring (bool): Whether the donation belongs to a recurring plan.
        created_at (datetime): When the donation was made.
    """
    __tablename__ = "donations"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Float, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    status = Column(SAEnum(DonationStatus), nullable=False, default=DonationStatus.PENDING, index=True)
    donor_email = Column(String(100), nullable=True, index=True)
    project_id = Column(String(64), nullable=True)
    goal_id = Column(Integer, ForeignKey("donation_goals.id"), nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=False), server_default=func.now(), index=True)

    goal = relationship("DonationGoal", back_populates="donations")

    def __repr__(self):
        return f"<Donation(id={self.id}, amount={self.amount}, currency='{self.currency}', status='{self.status}')>"
