import logging
from datetime import datetime
from typing import Dict, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.prediction import ForecastReport, HistoricalPoint, ModelResult, ModelType
from app.services.aggregation_service import monthly_donation_totals
from app.services.forecast_models import MODELS, ForecastModel

logger = logging.getLogger(__name__)


class PredictionService:
    def __init__(self, models: Optional[Sequence[ForecastModel]] = None):
        """Initializes the prediction service with its forecasting strategies.

        The order of ``models`` decides ties when ranking by accuracy.
        """
        self.models = list(models) if models is not None else [model_cls() for model_cls in MODELS.values()]

    def run_models(self, history: Sequence[HistoricalPoint], horizon: int) -> Dict[str, ModelResult]:
        """Runs every strategy independently over the same history."""
        return {model.type.value: model.fit_predict(history, horizon) for model in self.models}

    @staticmethod
    def best_model(results: Dict[str, ModelResult]) -> ModelType:
        best = max(results.values(), key=lambda r: r.accuracy)
        return best.type

    def forecast(
        self,
        db: Session,
        months: Optional[int] = None,
        lookback: Optional[int] = None,
        now: Optional[datetime] = None,
        currency: Optional[str] = None,
    ) -> ForecastReport:
        """Forecasts monthly donation totals.

        This method performs a multi-step process:
        1. Aggregates completed donations per month over the lookback window.
        2. Fits each forecasting strategy on that history.
        3. Scores each in-sample fit and picks the most accurate model.

        Args:
            db (Session): The SQLAlchemy database session.
            months (Optional[int]): Number of future months, defaults to FORECAST_HORIZON_MONTHS.
            lookback (Optional[int]): Months of history, defaults to FORECAST_LOOKBACK_MONTHS.
            now (Optional[datetime]): Reference instant for the window.
            currency (Optional[str]): Restrict the history to one currency.

        Returns:
            ForecastReport: History, per-model results and the best model.

        Raises:
            ValueError: If the lookback window or horizon is invalid.
            DataUnavailable: If donations could not be loaded.
        """
        months = months or settings.FORECAST_HORIZON_MONTHS
        lookback = lookback or settings.FORECAST_LOOKBACK_MONTHS
        now = now or datetime.utcnow()

        history = monthly_donation_totals(db, months=lookback, now=now, currency=currency)
        results = self.run_models(history, months)
        best = self.best_model(results)

        degraded = [name for name, r in results.items() if r.insufficient_data]
        if degraded:
            logger.warning(f"Forecast built on insufficient history for models: {', '.join(degraded)}")

        return ForecastReport(
            generated_at=now,
            horizon=months,
            history=history,
            models=results,
            best_model=best,
        )

prediction_service = PredictionService()
