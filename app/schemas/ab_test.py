from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict
from app.models.ab_test import ABTestStatus, EventType, TargetMetric, VariantType

class VariantIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None

class ABTestCreate(BaseModel):
    """Schema for creating an experiment with exactly two variants."""
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    variant_a: VariantIn
    variant_b: VariantIn
    target_metric: TargetMetric = TargetMetric.CONVERSION
    significance_level: Optional[float] = Field(None, gt=0, lt=1)
    minimum_sample_size: Optional[int] = Field(None, gt=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class ABTestStatusUpdate(BaseModel):
    status: ABTestStatus

class Variant(BaseModel):
    type: VariantType
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True

class ABTest(BaseModel):
    """Schema for an experiment retrieved from the database."""
    id: int
    name: str
    description: Optional[str] = None
    target_metric: TargetMetric
    significance_level: float
    minimum_sample_size: Optional[int] = None
    status: ABTestStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    variants: List[Variant]

    class Config:
        from_attributes = True

class ABTestEventCreate(BaseModel):
    variant: VariantType
    event_type: EventType
    value: Optional[float] = Field(None, ge=0)

class ABTestEvent(ABTestEventCreate):
    id: int
    test_id: int
    timestamp: datetime

    class Config:
        from_attributes = True

class VariantMetrics(BaseModel):
    """Metrics derived from one variant's events.

    Rates are ``None`` when their denominator is zero.
    """
    variant: VariantType
    views: int = 0
    clicks: int = 0
    conversions: int = 0
    total_value: float = 0.0
    conversion_rate: Optional[float] = None
    average_value: Optional[float] = None
    bounce_rate: Optional[float] = None
    time_on_page: Optional[float] = None

class ABTestResult(BaseModel):
    """Outcome of a test evaluation.

    ``improvement`` is the relative lift of the leading variant in percent. For
    conversion tests with a zero baseline it is the difference in percentage
    points; value tests with a zero baseline report 0.
    """
    test_id: int
    target_metric: TargetMetric
    winner: Optional[VariantType] = None
    p_value: float
    confidence: float
    improvement: float
    significance_level: float
    sample_size: int
    conversion_rate: Optional[float] = None
    average_value: Optional[float] = None
    variants: Dict[str, VariantMetrics]
