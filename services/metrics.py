from models.variants import MetricType, VariantMetrics, VariantResult

import math

# Metrics where a smaller value means the variant did better
LOWER_IS_BETTER = (MetricType.CPA, MetricType.CPC)


def calculate_cvr(conversions: int, clicks: int) -> float:
    """Conversion rate in percent, 0 without clicks."""
    if clicks == 0:
        return 0.0
    return conversions / clicks * 100


def calculate_ctr(clicks: int, impressions: int) -> float:
    """Click-through rate in percent, 0 without impressions."""
    if impressions == 0:
        return 0.0
    return clicks / impressions * 100


def calculate_cpa(spend: float, conversions: int) -> float:
    """
    Cost per acquisition.

    Without conversions the cost is unbounded, so this returns `math.inf`
    rather than 0. Callers comparing CPAs must leave infinite values out.
    """
    if conversions == 0:
        return math.inf
    return spend / conversions


def calculate_roas(revenue: float, spend: float) -> float:
    if spend == 0:
        return 0.0
    return revenue / spend


def calculate_cpc(spend: float, clicks: int) -> float:
    if clicks == 0:
        return 0.0
    return spend / clicks


def calculate_cpm(spend: float, impressions: int) -> float:
    if impressions == 0:
        return 0.0
    return spend / impressions * 1000


def calculate_variant_metrics(result: VariantResult) -> VariantMetrics:
    """Derives every rate of a variant from its raw counters."""
    return VariantMetrics(
        cvr=calculate_cvr(result.conversions, result.clicks),
        ctr=calculate_ctr(result.clicks, result.impressions),
        cpa=calculate_cpa(result.spend, result.conversions),
        roas=calculate_roas(result.revenue, result.spend),
        cpc=calculate_cpc(result.spend, result.clicks),
        cpm=calculate_cpm(result.spend, result.impressions),
    )


def get_metric_value(result: VariantResult, metric: MetricType | str) -> float:
    """Value of the given metric for one variant. Unknown metrics fall back to CVR."""
    metrics = calculate_variant_metrics(result)

    if metric == MetricType.REVENUE:
        return result.revenue
    if metric in (MetricType.CTR, MetricType.CPA, MetricType.ROAS, MetricType.CPC):
        return getattr(metrics, MetricType(metric).value)
    return metrics.cvr


def is_lower_better(metric: MetricType | str) -> bool:
    return metric in LOWER_IS_BETTER
