"""Monthly donation forecasting strategies.

Every model follows the same small interface: ``fit_predict`` takes the
monthly history produced by the aggregation service and returns a
``ModelResult`` holding one ``ForecastPoint`` per future month, the in-sample
RMSE and the normalised accuracy. Models keep no state between calls.

Confidence starts at 1.0 for the first future month and decays linearly with
the horizon step at a model-specific rate. When the history is shorter than
the horizon, or shorter than what the model needs, the result is flagged
``insufficient_data`` and every confidence is capped near zero instead of the
call failing.
"""
import logging
from datetime import datetime
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from app.core.exceptions import InsufficientData
from app.schemas.prediction import ForecastPoint, HistoricalPoint, ModelResult, ModelType
from app.services.accuracy_service import score_fit

logger = logging.getLogger(__name__)

DEFAULT_HORIZON = 6
INSUFFICIENT_DATA_CONFIDENCE = 0.1

Fit = Tuple[np.ndarray, np.ndarray, np.ndarray]


def future_month_labels(history: Sequence[HistoricalPoint], horizon: int) -> List[str]:
    """Labels ("YYYY-MM") of the ``horizon`` months following the history."""
    last_date = history[-1].date if history else datetime.utcnow()
    last = pd.Period(last_date, freq="M")
    return [str(last + step) for step in range(1, horizon + 1)]


def decayed_confidence(step: int, decay: float, cap: float = 1.0) -> float:
    return min(cap, max(0.0, 1.0 - decay * step))


def _ratio(num: float, den: float, default: float) -> float:
    return num / den if den != 0 else default


class ForecastModel:
    """Base strategy. Subclasses implement ``_fit_extrapolate``."""

    type: ModelType
    confidence_decay: float = 0.1
    min_points: int = 2

    def _fit_extrapolate(self, values: np.ndarray, horizon: int) -> Fit:
        """Returns ``(fitted, actual, future)``.

        ``fitted`` and ``actual`` are the aligned in-sample series used for
        scoring; ``future`` holds ``horizon`` raw predictions.
        """
        raise NotImplementedError

    def _fallback(self, values: np.ndarray, horizon: int) -> Fit:
        """Used when ``_fit_extrapolate`` raises ``InsufficientData``."""
        return LinearTrendModel()._fit_extrapolate(values, horizon)

    def fit_predict(self, history: Sequence[HistoricalPoint], horizon: int = DEFAULT_HORIZON) -> ModelResult:
        if horizon < 1:
            raise ValueError(f"Forecast horizon must be at least 1 month, got {horizon}")

        labels = future_month_labels(history, horizon)
        values = np.array([p.value for p in history], dtype=float)
        n = len(values)

        if n == 0:
            return ModelResult(
                type=self.type,
                predictions=[ForecastPoint(date=label, amount=0.0, confidence=0.0) for label in labels],
                accuracy=0.0,
                rmse=0.0,
                insufficient_data=True,
            )

        insufficient = n < max(horizon, self.min_points)
        try:
            fitted, actual, future = self._fit_extrapolate(values, horizon)
        except InsufficientData as e:
            logger.info(f"{self.type.value} model degraded: {e}")
            insufficient = True
            fitted, actual, future = self._fallback(values, horizon)

        score = score_fit(fitted, actual)
        cap = INSUFFICIENT_DATA_CONFIDENCE * min(n, horizon) / horizon if insufficient else 1.0
        amounts = np.maximum(np.nan_to_num(future, nan=0.0, posinf=0.0, neginf=0.0), 0.0)

        predictions = [
            ForecastPoint(
                date=label,
                amount=float(amount),
                confidence=decayed_confidence(step, self.confidence_decay, cap),
            )
            for step, (label, amount) in enumerate(zip(labels, amounts))
        ]
        return ModelResult(
            type=self.type,
            predictions=predictions,
            accuracy=score.accuracy,
            rmse=score.rmse,
            insufficient_data=insufficient,
        )


class LinearTrendModel(ForecastModel):
    """Ordinary least squares of the monthly total on the month index."""

    type = ModelType.LINEAR
    confidence_decay = 0.1
    min_points = 2

    @staticmethod
    def regression(values: np.ndarray) -> Tuple[float, float]:
        n = len(values)
        if n == 0:
            return 0.0, 0.0
        if n == 1:
            return 0.0, float(values[0])
        x = np.arange(n, dtype=float)
        sum_x, sum_y = x.sum(), values.sum()
        sum_xy, sum_xx = (x * values).sum(), (x * x).sum()
        slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
        intercept = (sum_y - slope * sum_x) / n
        return float(slope), float(intercept)

    def _fit_extrapolate(self, values: np.ndarray, horizon: int) -> Fit:
        slope, intercept = self.regression(values)
        n = len(values)
        fitted = slope * np.arange(n) + intercept
        future = slope * np.arange(n, n + horizon) + intercept
        return fitted, values, future


class HoltWintersModel(ForecastModel):
    """Multiplicative Holt-Winters smoothing with fixed constants.

    Needs one full seasonal period to initialise the seasonal indices; with
    less history it falls back to the linear trend. A zero level or a zero
    seasonal index is treated as a neutral index of 1.0.
    """

    type = ModelType.EXPONENTIAL
    confidence_decay = 0.15

    def __init__(self, alpha: float = 0.2, beta: float = 0.1, gamma: float = 0.3, period: int = 12):
        self.alpha = alpha
        self.beta = beta
        self.gamma = gamma
        self.period = period
        self.min_points = period + 1

    def _fit_extrapolate(self, values: np.ndarray, horizon: int) -> Fit:
        p, n = self.period, len(values)
        if n < p:
            raise InsufficientData(p, n, "months for seasonal indices")

        level = float(values[:p].mean())
        if n >= 2 * p:
            trend = float(values[p:2 * p].mean() - values[:p].mean()) / p
        else:
            trend = float(values[p - 1] - values[0]) / max(p - 1, 1)
        seasonal = [_ratio(float(v), level, 1.0) for v in values[:p]]

        fitted = []
        for t in range(p, n):
            y = float(values[t])
            s = seasonal[t - p]
            fitted.append((level + trend) * s)
            new_level = self.alpha * _ratio(y, s, y) + (1 - self.alpha) * (level + trend)
            trend = self.beta * (new_level - level) + (1 - self.beta) * trend
            seasonal.append(self.gamma * _ratio(y, new_level, 1.0) + (1 - self.gamma) * s)
            level = new_level

        future = np.array([
            (level + h * trend) * seasonal[n - p + (h - 1) % p]
            for h in range(1, horizon + 1)
        ])
        return np.array(fitted), values[p:], future


class ArimaModel(ForecastModel):
    """Simplified ARIMA(p, d, q) with fixed coefficients.

    The AR coefficient (0.7) and MA coefficient (0.3) are not estimated; each
    is spread evenly over its lags and applied to the differenced series,
    which is then integrated back. This is an approximation, not a
    maximum-likelihood ARIMA fit. Only ``d`` of 0 or 1 is supported.
    """

    type = ModelType.ARIMA
    confidence_decay = 0.12

    def __init__(self, p: int = 2, d: int = 1, q: int = 2, ar_coefficient: float = 0.7, ma_coefficient: float = 0.3):
        if d not in (0, 1):
            raise ValueError(f"Differencing order must be 0 or 1, got {d}")
        if p < 1 or q < 1:
            raise ValueError("AR and MA orders must be at least 1")
        self.p, self.d, self.q = p, d, q
        self.ar_coefficient = ar_coefficient
        self.ma_coefficient = ma_coefficient
        self.min_points = d + max(p, q) + 1

    def _fit_extrapolate(self, values: np.ndarray, horizon: int) -> Fit:
        n = len(values)
        if n < self.min_points:
            raise InsufficientData(self.min_points, n, "months")

        w = np.diff(values, n=self.d) if self.d else values.copy()
        phi = self.ar_coefficient / self.p
        theta = self.ma_coefficient / self.q

        ar = np.zeros(len(w))
        for i in range(self.p, len(w)):
            ar[i] = phi * w[i - self.p:i].sum()
        errors = w - ar
        ma = np.zeros(len(w))
        for i in range(self.q, len(w)):
            ma[i] = theta * errors[i - self.q:i].sum()
        w_fit = ar + ma

        w_ext, e_ext, steps = list(w), list(errors), []
        for _ in range(horizon):
            nxt = phi * sum(w_ext[-self.p:]) + theta * sum(e_ext[-self.q:])
            w_ext.append(nxt)
            e_ext.append(0.0)
            steps.append(nxt)

        if self.d:
            return values[:-1] + w_fit, values[1:], values[-1] + np.cumsum(steps)
        return w_fit, values, np.array(steps)

    def _fallback(self, values: np.ndarray, horizon: int) -> Fit:
        # naive last-value forecast
        return values[:-1], values[1:], np.full(horizon, values[-1])


MODELS = {
    ModelType.LINEAR: LinearTrendModel,
    ModelType.EXPONENTIAL: HoltWintersModel,
    ModelType.ARIMA: ArimaModel,
}
