import logging
import math
from typing import NamedTuple, Sequence

import numpy as np

from app.core.exceptions import DegenerateInput

logger = logging.getLogger(__name__)


class FitScore(NamedTuple):
    rmse: float
    accuracy: float


def rmse(fitted: Sequence[float], actual: Sequence[float]) -> float:
    """Root-mean-squared error over the overlapping prefix of both series.

    Returns 0.0 when there is nothing to compare.
    """
    n = min(len(fitted), len(actual))
    if n == 0:
        return 0.0
    diff = np.asarray(fitted[:n], dtype=float) - np.asarray(actual[:n], dtype=float)
    return float(math.sqrt(np.mean(diff ** 2)))


def _normalised_error(error: float, actual: Sequence[float]) -> float:
    peak = max(actual) if len(actual) else 0.0
    if peak <= 0:
        raise DegenerateInput("actual series has no positive value to normalise against")
    return error / peak


def score_fit(fitted: Sequence[float], actual: Sequence[float]) -> FitScore:
    """Scores a model's in-sample fit against the observed series.

    ``accuracy`` is ``1 - rmse / max(actual)`` clamped to ``[0, 1]``. A series
    with no positive value has no scale, so its accuracy is reported as 0.0.
    """
    n = min(len(fitted), len(actual))
    error = rmse(fitted, actual)
    try:
        accuracy = max(0.0, 1.0 - _normalised_error(error, list(actual[:n])))
    except DegenerateInput as e:
        logger.info(f"Accuracy unavailable: {e}")
        accuracy = 0.0
    return FitScore(rmse=error, accuracy=accuracy)
