"""
Two-proportion z-test between a control and a treatment variant, and the
inverse computation used for planning (required sample size).

Rates are handled in percent everywhere (10.0 means 10%) and converted to
proportions only inside the standard error formula.
"""
from models.results import SignificanceResult
from models.variants import MetricType, VariantResult
from services.metrics import calculate_variant_metrics

import logging
import math

logger = logging.getLogger(__name__)

# Critical value used for the minimum detectable effect. Always the 95% value,
# independent of the confidence level the caller tests at.
MDE_CRITICAL_Z = 1.96

# Z values for the sample size planner
Z_ALPHA_95 = 1.96
Z_ALPHA_99 = 2.576
Z_BETA_80 = 0.84
Z_BETA_90 = 1.28


def calculate_standard_error(rate: float, sample_size: int) -> float:
    """Standard error of a rate given in percent, 0 for an empty sample."""
    if sample_size == 0:
        return 0.0
    p = rate / 100
    return math.sqrt(p * (1 - p) / sample_size)


def calculate_z_score(rate_a: float, rate_b: float, se_a: float, se_b: float) -> float:
    """z of (rate_a - rate_b); 0 when neither rate carries any variance."""
    se_diff = math.sqrt(se_a * se_a + se_b * se_b)
    if se_diff == 0:
        return 0.0
    return (rate_a - rate_b) / 100 / se_diff


def calculate_p_value(z_score: float) -> float:
    """
    Two-sided p-value of a z-score.

    Uses the Abramowitz & Stegun polynomial for the upper tail of the standard
    normal distribution (26.2.17). It stays within about 1e-3 of the exact value
    for |z| <= 5, which is more than enough to compare against 0.05 or 0.01.
    """
    abs_z = abs(z_score)
    t = 1 / (1 + 0.2316419 * abs_z)
    d = 0.3989423 * math.exp(-abs_z * abs_z / 2)
    tail = d * t * (0.3193815 + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274))))
    return 2 * tail


def _rates_and_sizes(control: VariantResult, treatment: VariantResult, metric: MetricType | str):
    control_metrics = calculate_variant_metrics(control)
    treatment_metrics = calculate_variant_metrics(treatment)

    if metric == MetricType.CTR:
        return control_metrics.ctr, treatment_metrics.ctr, control.impressions, treatment.impressions

    # CVR, and the fallback for metrics that are not proportions
    return control_metrics.cvr, treatment_metrics.cvr, control.clicks, treatment.clicks


def run_significance_test(
    control: VariantResult,
    treatment: VariantResult,
    metric: MetricType | str = MetricType.CVR,
    confidence_level: float = 0.95,
) -> SignificanceResult:
    """
    Tests whether the treatment's rate differs from the control's.

    Only CTR (per impression) and CVR (per click) are proportions; every other
    metric is tested on CVR. A positive z-score means the treatment rate is higher.
    """
    control_rate, treatment_rate, control_n, treatment_n = _rates_and_sizes(control, treatment, metric)

    se_control = calculate_standard_error(control_rate, control_n)
    se_treatment = calculate_standard_error(treatment_rate, treatment_n)
    z_score = calculate_z_score(treatment_rate, control_rate, se_treatment, se_control)
    p_value = calculate_p_value(z_score)

    pooled_se = math.sqrt(se_control * se_control + se_treatment * se_treatment)

    result = SignificanceResult(
        is_significant=p_value < (1 - confidence_level),
        p_value=p_value,
        confidence_level=confidence_level,
        standard_error=pooled_se,
        z_score=z_score,
        minimum_detectable_effect=MDE_CRITICAL_Z * pooled_se * 100,
    )
    logger.debug("significance %s vs %s on %s: z=%.3f p=%.4f",
                 control.variant_id, treatment.variant_id, metric, z_score, p_value)
    return result


def calculate_required_sample_size(
    baseline_rate: float,
    minimum_detectable_effect: float,
    power: float = 0.8,
    confidence_level: float = 0.95,
) -> float:
    """
    Sample size per variant needed to detect an absolute lift.

    Both rates are in percent: baseline 10 with effect 2 plans for 10% -> 12%.
    Only 95%/99% confidence and 80%/90% power are distinguished; any confidence
    other than 0.95 uses the 99% value and any power other than 0.8 the 90% one.

    Returns an int, or `math.inf` when the effect is zero.
    """
    z_alpha = Z_ALPHA_95 if confidence_level == 0.95 else Z_ALPHA_99
    z_beta = Z_BETA_80 if power == 0.8 else Z_BETA_90

    p1 = baseline_rate / 100
    p2 = (baseline_rate + minimum_detectable_effect) / 100
    pooled_p = (p1 + p2) / 2

    numerator = 2 * (z_alpha + z_beta) ** 2 * pooled_p * (1 - pooled_p)
    denominator = (p2 - p1) ** 2

    if denominator == 0:
        return math.inf

    return math.ceil(numerator / denominator)
