from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from app.db.session import Base


class User(Base):
    """Represents a back-office user of the donation platform.

    Donors never authenticate against this service; only staff who read the
    dashboards do. Admin rights are granted when the account is first created
    from an address listed in ``ADMIN_EMAILS``.

    Attributes:
        id (int): Primary key for the user.
        username (str): The user's unique username.
        email (str): The user's unique email address.
        full_name (str): The user's full name.
        is_active (bool): Flag indicating if the user's account is active.
        is_admin (bool): Whether the user may read analytics and manage tests.
        created_at (datetime): Timestamp of account creation.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    full_name = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=False), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', email='{self.email}')>"
