from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List
import enum

class ModelType(str, enum.Enum):
    LINEAR      = "linear"
    EXPONENTIAL = "exponential"
    ARIMA       = "arima"

class HistoricalPoint(BaseModel):
    """Summed completed donations for one calendar month."""
    date: datetime
    value: float

    class Config:
        frozen = True

class ForecastPoint(BaseModel):
    """Represents a single month in a donation forecast."""
    date: str = Field(..., examples=["2026-11"])
    amount: float = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=1)

class ModelResult(BaseModel):
    type: ModelType
    predictions: List[ForecastPoint]
    accuracy: float = Field(..., ge=0)
    rmse: float = Field(..., ge=0)
    insufficient_data: bool = False

class ForecastReport(BaseModel):
    """All model results for one forecast request."""
    generated_at: datetime
    horizon: int
    history: List[HistoricalPoint]
    models: Dict[str, ModelResult]
    best_model: ModelType
