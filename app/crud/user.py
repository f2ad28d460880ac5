from sqlalchemy.orm import Session
from typing import Optional

from app.models.user import User
from app.schemas.user import UserCreate

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Retrieves a single user by their email address (case-insensitive)."""
    return db.query(User).filter(User.email == email.lower()).first()

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()

def available_username(db: Session, email: str) -> str:
    """Derives a unique username of at least three characters from an email."""
    base = email.split("@")[0].lower()
    if len(base) < 3:
        base = f"{base}_user"
    base = base[:40]
    candidate, n = base, 1
    while get_user_by_username(db, candidate) is not None:
        n += 1
        candidate = f"{base}{n}"
    return candidate

def create_user(db: Session, user_in: UserCreate) -> User:
    """Creates a new user in the database.

    Args:
        db (Session): The SQLAlchemy database session.
        user_in (UserCreate): The data for the new user.

    Returns:
        User: The newly created User object.
    """
    db_user = User(
        email=user_in.email.lower(),
        username=user_in.username,
        full_name=user_in.full_name,
        is_admin=user_in.is_admin,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
