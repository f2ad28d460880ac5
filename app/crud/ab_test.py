from datetime import datetime
from sqlalchemy.orm import Session
from typing import List, Optional
from app.models.ab_test import ABTest, ABTestEvent, ABTestStatus, ABTestVariant, VariantType
from app.schemas.ab_test import ABTestCreate, ABTestEventCreate

def create_test(db: Session, test_in: ABTestCreate, default_significance: float = 0.05) -> ABTest:
    """Creates an experiment together with its A and B variant rows.

    Args:
        db (Session): The SQLAlchemy database session.
        test_in (ABTestCreate): Experiment definition.
        default_significance (float): Used when the request omits a significance level.

    Returns:
        ABTest: The newly created experiment.
    """
    test = ABTest(
        name=test_in.name,
        description=test_in.description,
        target_metric=test_in.target_metric,
        significance_level=test_in.significance_level or default_significance,
        minimum_sample_size=test_in.minimum_sample_size,
        status=ABTestStatus.ACTIVE,
        end_date=test_in.end_date,
    )
    if test_in.start_date:
        test.start_date = test_in.start_date
    test.variants = [
        ABTestVariant(type=VariantType.A, **test_in.variant_a.model_dump()),
        ABTestVariant(type=VariantType.B, **test_in.variant_b.model_dump()),
    ]
    db.add(test); db.commit(); db.refresh(test)
    return test

def get_test(db: Session, test_id: int) -> Optional[ABTest]:
    return db.query(ABTest).filter(ABTest.id == test_id).first()

def get_tests(db: Session, status: Optional[ABTestStatus] = None, skip: int = 0, limit: int = 50) -> List[ABTest]:
    q = db.query(ABTest)
    if status:
        q = q.filter(ABTest.status == status)
    return q.order_by(ABTest.id.desc()).offset(skip).limit(limit).all()

def update_status(db: Session, test: ABTest, status: ABTestStatus) -> ABTest:
    """Moves a test to ``status``; completing a test stamps its end date."""
    test.status = status
    if status == ABTestStatus.COMPLETED and test.end_date is None:
        test.end_date = datetime.utcnow()
    db.add(test); db.commit(); db.refresh(test)
    return test

def record_event(db: Session, test_id: int, event_in: ABTestEventCreate) -> ABTestEvent:
    """Appends an event to a test's log. Events are never updated or deleted."""
    event = ABTestEvent(test_id=test_id, **event_in.model_dump())
    db.add(event); db.commit(); db.refresh(event)
    return event

def get_events(db: Session, test_id: int, variant: Optional[VariantType] = None) -> List[ABTestEvent]:
    q = db.query(ABTestEvent).filter(ABTestEvent.test_id == test_id)
    if variant:
        q = q.filter(ABTestEvent.variant == variant)
    return q.order_by(ABTestEvent.timestamp.asc(), ABTestEvent.id.asc()).all()
