from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.config import settings
from app.core.dependencies import get_current_admin
from app.core.exceptions import ABTestClosed, ABTestNotFound, DataUnavailable
from app.crud import ab_test as crud_ab
from app.db.session import get_db
from app.models.ab_test import ABTestStatus
from app.schemas.ab_test import (
    ABTest, ABTestCreate, ABTestEvent, ABTestEventCreate, ABTestResult, ABTestStatusUpdate
)
from app.services import ab_testing_service

router = APIRouter(prefix="/ab-tests", tags=["A/B Tests"])

@router.post("/", response_model=ABTest, status_code=status.HTTP_201_CREATED)
def create_ab_test(
    data: ABTestCreate,
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Creates an active experiment with variants A and B."""
    return crud_ab.create_test(db, data, default_significance=settings.AB_TEST_SIGNIFICANCE_LEVEL)

@router.get("/", response_model=List[ABTest])
def list_ab_tests(
    status: Optional[ABTestStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, gt=0, le=200),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    return crud_ab.get_tests(db, status=status, skip=skip, limit=limit)

@router.get("/{test_id}", response_model=ABTest)
def get_ab_test(
    test_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    test = crud_ab.get_test(db, test_id)
    if not test:
        raise HTTPException(404, "A/B test not found")
    return test

@router.patch("/{test_id}/status", response_model=ABTest)
def update_ab_test_status(
    data: ABTestStatusUpdate,
    test_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Pauses, resumes or completes a test. Completed tests cannot be reopened."""
    test = crud_ab.get_test(db, test_id)
    if not test:
        raise HTTPException(404, "A/B test not found")
    if test.status == ABTestStatus.COMPLETED and data.status != ABTestStatus.COMPLETED:
        raise HTTPException(409, "A completed test cannot be reopened")
    return crud_ab.update_status(db, test, data.status)

@router.post("/{test_id}/events", response_model=ABTestEvent, status_code=status.HTTP_201_CREATED)
def record_ab_test_event(
    data: ABTestEventCreate,
    test_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
):
    """Appends a view, click, conversion, bounce or time-on-page event.

    This endpoint is called by the donor-facing site and is not authenticated.

    Raises:
        HTTPException: 404 for an unknown test, 409 if the test is not active.
    """
    try:
        return ab_testing_service.record_event(db, test_id, data)
    except ABTestNotFound:
        raise HTTPException(404, "A/B test not found")
    except ABTestClosed as e:
        raise HTTPException(409, str(e))

@router.get("/{test_id}/results", response_model=ABTestResult)
def get_ab_test_results(
    test_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    """Evaluates the test: per-variant metrics, p-value, winner and improvement.

    Raises:
        HTTPException: 404 for an unknown test, 503 if events cannot be loaded.
    """
    try:
        return ab_testing_service.evaluate_test(db, test_id)
    except ABTestNotFound:
        raise HTTPException(404, "A/B test not found")
    except DataUnavailable as e:
        raise HTTPException(503, f"A/B test data unavailable: {str(e)}")

@router.get("/{test_id}/recommendations", response_model=List[str])
def get_ab_test_recommendations(
    test_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_admin = Depends(get_current_admin),
):
    try:
        result = ab_testing_service.evaluate_test(db, test_id)
    except ABTestNotFound:
        raise HTTPException(404, "A/B test not found")
    except DataUnavailable as e:
        raise HTTPException(503, f"A/B test data unavailable: {str(e)}")
    return ab_testing_service.recommendations(result)
