"""Evaluation of two-variant (A/B) experiments run on the donor site.

Results are recomputed from the event log on every call. A variant without
views has no conversion rate; such a test never produces a winner, and its
rates are reported as ``None`` rather than NaN.
"""
import logging
from typing import List, Optional, Sequence

import numpy as np
from scipy import stats
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ABTestClosed, ABTestNotFound, DataUnavailable, DegenerateInput
from app.crud import ab_test as crud_ab
from app.models.ab_test import ABTestEvent, ABTestStatus, EventType, TargetMetric, VariantType
from app.schemas.ab_test import ABTestEventCreate, ABTestResult, VariantMetrics

logger = logging.getLogger(__name__)


def _rate(numerator: float, denominator: float) -> float:
    if denominator == 0:
        raise DegenerateInput("rate with a zero denominator")
    return numerator / denominator


def _optional_rate(numerator: float, denominator: float) -> Optional[float]:
    try:
        return _rate(numerator, denominator)
    except DegenerateInput:
        return None


def build_metrics(
    variant: VariantType,
    views: int,
    clicks: int = 0,
    conversions: int = 0,
    total_value: float = 0.0,
    bounces: int = 0,
    time_on_page_total: float = 0.0,
) -> VariantMetrics:
    """Derives the rate fields of ``VariantMetrics`` from raw counts."""
    return VariantMetrics(
        variant=variant,
        views=views,
        clicks=clicks,
        conversions=conversions,
        total_value=total_value,
        conversion_rate=_optional_rate(conversions, views),
        average_value=_optional_rate(total_value, conversions),
        bounce_rate=_optional_rate(bounces, views),
        time_on_page=_optional_rate(time_on_page_total, views),
    )


def variant_metrics(variant: VariantType, events: Sequence[ABTestEvent]) -> VariantMetrics:
    counts = {event_type: 0 for event_type in EventType}
    totals = {event_type: 0.0 for event_type in EventType}
    for event in events:
        if event.variant != variant:
            continue
        counts[event.event_type] += 1
        totals[event.event_type] += event.value or 0.0

    return build_metrics(
        variant,
        views=counts[EventType.VIEW],
        clicks=counts[EventType.CLICK],
        conversions=counts[EventType.CONVERSION],
        total_value=totals[EventType.CONVERSION],
        bounces=counts[EventType.BOUNCE],
        time_on_page_total=totals[EventType.TIME_ON_PAGE],
    )


def conversion_p_value(a: VariantMetrics, b: VariantMetrics) -> float:
    """Chi-square test of independence on the 2x2 conversion table.

    Tables with an empty row or column have no defined statistic; they give
    a p-value of 1.
    """
    table = np.array([
        [a.conversions, max(a.views - a.conversions, 0)],
        [b.conversions, max(b.views - b.conversions, 0)],
    ])
    if table.sum(axis=0).min() == 0 or table.sum(axis=1).min() == 0:
        return 1.0
    _, p_value, _, _ = stats.chi2_contingency(table, correction=False)
    return float(p_value)


def _welch_p_value(values_a: Sequence[float], values_b: Sequence[float]) -> float:
    if np.var(values_a) == 0 and np.var(values_b) == 0:
        raise DegenerateInput("both value samples have zero variance")
    result = stats.ttest_ind(values_a, values_b, equal_var=False)
    p_value = float(result.pvalue)
    if np.isnan(p_value):
        raise DegenerateInput("t statistic is undefined")
    return p_value


def value_p_value(values_a: Sequence[float], values_b: Sequence[float]) -> float:
    """Welch two-sample t-test on the value of each conversion.

    Samples with fewer than two values, or with no variance in both arms,
    have no defined statistic; they give a p-value of 1.
    """
    if len(values_a) < 2 or len(values_b) < 2:
        return 1.0
    try:
        return _welch_p_value(values_a, values_b)
    except DegenerateInput as e:
        logger.info(f"Value test undefined: {e}")
        return 1.0


def _target_rate(metrics: VariantMetrics, target_metric: TargetMetric) -> Optional[float]:
    if target_metric == TargetMetric.VALUE:
        return metrics.average_value
    return metrics.conversion_rate


def improvement(rate: float, baseline: float, target_metric: TargetMetric = TargetMetric.CONVERSION) -> float:
    """Relative improvement in percent.

    With a zero baseline a conversion rate difference is reported in
    percentage points; a zero average value has no relative scale and gives 0.
    """
    try:
        return _rate(rate - baseline, baseline) * 100
    except DegenerateInput:
        if target_metric == TargetMetric.VALUE:
            return 0.0
        return (rate - baseline) * 100


def compare_variants(
    a: VariantMetrics,
    b: VariantMetrics,
    target_metric: TargetMetric = TargetMetric.CONVERSION,
    significance_level: float = 0.05,
    values_a: Sequence[float] = (),
    values_b: Sequence[float] = (),
    minimum_sample_size: Optional[int] = None,
    test_id: int = 0,
) -> ABTestResult:
    """Decides whether one variant significantly beats the other.

    Args:
        a (VariantMetrics): Metrics of variant A.
        b (VariantMetrics): Metrics of variant B.
        target_metric (TargetMetric): ``conversion`` uses a chi-square test on
            conversion counts, ``value`` a t-test on per-conversion values.
        significance_level (float): Highest p-value that declares a winner.
        values_a (Sequence[float]): Conversion values of A, for ``value`` tests.
        values_b (Sequence[float]): Conversion values of B, for ``value`` tests.
        minimum_sample_size (Optional[int]): Views each variant needs first.
        test_id (int): Identifier echoed in the result.

    Returns:
        ABTestResult: The evaluation, with ``winner`` None when not significant.
    """
    if target_metric == TargetMetric.VALUE:
        p_value = value_p_value(values_a, values_b)
    else:
        p_value = conversion_p_value(a, b)

    rate_a, rate_b = _target_rate(a, target_metric), _target_rate(b, target_metric)
    comparable = a.views > 0 and b.views > 0 and rate_a is not None and rate_b is not None
    enough_samples = minimum_sample_size is None or min(a.views, b.views) >= minimum_sample_size

    winner = None
    if comparable and enough_samples and p_value <= significance_level and rate_a != rate_b:
        winner = VariantType.A if rate_a > rate_b else VariantType.B

    if winner == VariantType.A:
        lift = improvement(rate_a, rate_b, target_metric)
    elif comparable:
        lift = improvement(rate_b, rate_a, target_metric)
    else:
        lift = 0.0

    winning = {VariantType.A: a, VariantType.B: b}.get(winner)
    return ABTestResult(
        test_id=test_id,
        target_metric=target_metric,
        winner=winner,
        p_value=p_value,
        confidence=(1 - p_value) * 100,
        improvement=lift,
        significance_level=significance_level,
        sample_size=a.views + b.views,
        conversion_rate=winning.conversion_rate if winning else None,
        average_value=winning.average_value if winning else None,
        variants={VariantType.A.value: a, VariantType.B.value: b},
    )


def evaluate_test(db: Session, test_id: int) -> ABTestResult:
    """Loads a test and its event log and evaluates it.

    Raises:
        ABTestNotFound: If no test has this id.
        DataUnavailable: If the test or its events could not be loaded.
    """
    try:
        test = crud_ab.get_test(db, test_id)
        if test is None:
            raise ABTestNotFound(test_id)
        events = crud_ab.get_events(db, test_id)
    except SQLAlchemyError as e:
        logger.error(f"Loading A/B test {test_id} failed: {e}")
        raise DataUnavailable(f"Could not load A/B test {test_id}: {e}") from e

    a = variant_metrics(VariantType.A, events)
    b = variant_metrics(VariantType.B, events)
    for metrics in (a, b):
        if metrics.views == 0:
            logger.info(f"A/B test {test_id}: variant {metrics.variant.value} has no views yet")

    values = {
        variant: [e.value or 0.0 for e in events if e.variant == variant and e.event_type == EventType.CONVERSION]
        for variant in VariantType
    }
    return compare_variants(
        a, b,
        target_metric=test.target_metric,
        significance_level=test.significance_level,
        values_a=values[VariantType.A],
        values_b=values[VariantType.B],
        minimum_sample_size=test.minimum_sample_size,
        test_id=test_id,
    )


def recommendations(result: ABTestResult) -> List[str]:
    """Turns an evaluation into short advice for the dashboard."""
    advice: List[str] = []
    if result.winner is None:
        advice.append("Test needs more data to reach statistical significance")
        for name, metrics in result.variants.items():
            if metrics.views == 0:
                advice.append(f"Variant {name} has no recorded views yet")
        return advice

    if result.improvement > 0:
        advice.append(f"Variant {result.winner.value} shows a {result.improvement:.2f}% improvement")
    if result.confidence < 95:
        advice.append("Consider running the test longer to increase confidence")
    return advice


def record_event(db: Session, test_id: int, event_in: ABTestEventCreate) -> ABTestEvent:
    """Appends an interaction to an active test's event log.

    Raises:
        ABTestNotFound: If no test has this id.
        ABTestClosed: If the test is paused or completed.
    """
    test = crud_ab.get_test(db, test_id)
    if test is None:
        raise ABTestNotFound(test_id)
    if test.status != ABTestStatus.ACTIVE:
        raise ABTestClosed(test_id, test.status.value)
    return crud_ab.record_event(db, test_id, event_in)

