# tests/conftest.py
import os
from datetime import datetime

import pandas as pd
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# 1) Tell our code to use an in-memory SQLite before any imports
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SENDGRID_API_KEY"] = ""

from app.main import app    # safe: tables land in the throwaway in-memory DB
from app.db.session import Base, get_db
from app.core.dependencies import get_current_admin
from app.crud.user import create_user
from app.models.donation import Donation, DonationStatus
from app.schemas.user import UserCreate


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,            # share one connection for everything
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def admin_user(db):
    return create_user(db, UserCreate(username="admin", email="admin@charity.org", is_admin=True))


@pytest.fixture
def anon_client(db):
    """Client on the test database, with real authentication."""
    def override_db():
        yield db
    app.dependency_overrides[get_db] = override_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client(anon_client, admin_user):
    """Client authenticated as an admin."""
    app.dependency_overrides[get_current_admin] = lambda: admin_user
    return anon_client


@pytest.fixture
def month_start():
    """First instant of the month ``months_back`` months before ``now``."""
    def _start(now: datetime, months_back: int) -> datetime:
        return (pd.Period(now, freq="M") - months_back).start_time.to_pydatetime()
    return _start


@pytest.fixture
def add_donation(db):
    def _add(amount, created_at, status=DonationStatus.COMPLETED, currency="USD", **kwargs):
        donation = Donation(amount=amount, created_at=created_at, status=status, currency=currency, **kwargs)
        db.add(donation)
        db.commit()
        db.refresh(donation)
        return donation
    return _add
