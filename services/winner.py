from models.results import WinnerDecision, WinnerStatus
from models.variants import MetricType, VariantResult
from services.metrics import get_metric_value, is_lower_better
from services.significance import run_significance_test

import logging
import math

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_LEVEL = 0.95
DEFAULT_MIN_SAMPLE_SIZE = 100
TIE_CONFIDENCE = 0.5


def calculate_improvement(control_value: float, treatment_value: float, metric: MetricType | str) -> float:
    """
    Relative improvement of the treatment over control in percent.

    Positive always means "treatment is better": for CPA/CPC a lower value is
    an improvement. Against a zero or unbounded control value the relative
    change is unbounded, so any difference comes out as +/-inf in the
    direction of the better side; equal values are 0.
    """
    lower_better = is_lower_better(metric)
    if control_value == 0 or not math.isfinite(control_value):
        if treatment_value == control_value:
            return 0.0
        treatment_better = treatment_value < control_value if lower_better else treatment_value > control_value
        return math.inf if treatment_better else -math.inf
    if lower_better:
        return (control_value - treatment_value) / control_value * 100
    return (treatment_value - control_value) / control_value * 100


def format_improvement(improvement: float) -> str:
    if math.isinf(improvement):
        return "an unbounded margin"
    return f"{improvement:.1f}%"


def _insufficient(reason: str) -> WinnerDecision:
    logger.info("winner decision: insufficient data (%s)", reason)
    return WinnerDecision(status=WinnerStatus.INSUFFICIENT_DATA, confidence=0, reason=reason)


def determine_winner(
    variants: list[VariantResult],
    primary_metric: MetricType | str = MetricType.CVR,
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
) -> WinnerDecision:
    """
    Compares every treatment against the control and returns one verdict.

    The checks run in a fixed order and the first one that applies decides:
    too few variants, no control, too little traffic, a significant winning
    treatment (largest improvement wins), a control that is significantly
    better than some treatment, and finally a tie.
    """
    if len(variants) < 2:
        return _insufficient("At least 2 variants required for comparison")

    # First control wins if the caller flagged several
    control = next((v for v in variants if v.is_control), None)
    if control is None:
        return _insufficient("No control variant specified")

    total_sample_size = sum(v.sample_size for v in variants)
    if total_sample_size < min_sample_size:
        return _insufficient(f"Insufficient sample size: {total_sample_size}/{min_sample_size}")

    treatments = [v for v in variants if not v.is_control]
    control_value = get_metric_value(control, primary_metric)
    lower_better = is_lower_better(primary_metric)

    comparisons = []
    for treatment in treatments:
        significance = run_significance_test(control, treatment, primary_metric, confidence_level)
        treatment_value = get_metric_value(treatment, primary_metric)
        improvement = calculate_improvement(control_value, treatment_value, primary_metric)
        comparisons.append((treatment, significance, treatment_value, improvement))

    # 1. Significant treatment with the largest positive improvement
    best = None
    for treatment, significance, _, improvement in comparisons:
        if significance.is_significant and improvement > 0:
            if best is None or improvement > best[2]:
                best = (treatment, significance, improvement)

    if best is not None:
        treatment, significance, improvement = best
        logger.info("winner decision: %s beats control by %.1f%% (p=%.4f)",
                    treatment.variant_id, improvement, significance.p_value)
        return WinnerDecision(
            status=WinnerStatus.WINNER,
            winner_variant_id=treatment.variant_id,
            improvement=improvement,
            confidence=1 - significance.p_value,
            reason=f"{treatment.variant_name} outperformed control by {format_improvement(improvement)}",
        )

    # 2. Control significantly ahead of at least one treatment
    for treatment, significance, treatment_value, _ in comparisons:
        control_better = control_value < treatment_value if lower_better else control_value > treatment_value
        if significance.is_significant and control_better:
            logger.info("winner decision: control %s ahead of %s (p=%.4f)",
                        control.variant_id, treatment.variant_id, significance.p_value)
            return WinnerDecision(
                status=WinnerStatus.LOSER,
                winner_variant_id=control.variant_id,
                confidence=1 - significance.p_value,
                reason="Control outperformed all treatments",
            )

    logger.info("winner decision: tie across %d treatments", len(treatments))
    return WinnerDecision(
        status=WinnerStatus.TIE,
        confidence=TIE_CONFIDENCE,
        reason="No statistically significant difference found",
    )
