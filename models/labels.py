"""Display labels for dashboards and notifications.

Plain lookup tables; the evaluation engine itself never reads them.
"""
from models.results import Impact, TestType, WinnerStatus
from models.variants import MetricType

METRIC_TYPE_LABELS: dict[MetricType, str] = {
    MetricType.CVR: "Conversion rate",
    MetricType.CTR: "Click-through rate",
    MetricType.CPA: "Cost per acquisition",
    MetricType.ROAS: "Return on ad spend",
    MetricType.REVENUE: "Revenue",
    MetricType.CPC: "Cost per click",
}

TEST_TYPE_LABELS: dict[TestType, str] = {
    TestType.AB_TEST: "A/B test",
    TestType.MULTIVARIATE: "Multivariate test",
    TestType.BANDIT: "Bandit test",
}

WINNER_STATUS_LABELS: dict[WinnerStatus, str] = {
    WinnerStatus.WINNER: "Winner found",
    WinnerStatus.LOSER: "Control ahead",
    WinnerStatus.TIE: "Tie",
    WinnerStatus.INSUFFICIENT_DATA: "Insufficient data",
}

IMPACT_LABELS: dict[Impact, str] = {
    Impact.HIGH: "High",
    Impact.MEDIUM: "Medium",
    Impact.LOW: "Low",
}


def get_metric_type_label(metric: MetricType | str) -> str:
    return METRIC_TYPE_LABELS[MetricType(metric)]


def get_test_type_label(test_type: TestType | str) -> str:
    return TEST_TYPE_LABELS[TestType(test_type)]


def get_winner_status_label(status: WinnerStatus | str) -> str:
    return WINNER_STATUS_LABELS[WinnerStatus(status)]


def get_impact_label(impact: Impact | str) -> str:
    return IMPACT_LABELS[Impact(impact)]


def all_labels() -> dict[str, dict[str, str]]:
    """Every table keyed by its raw value, as served by GET /labels."""
    return {
        "metric_types": {k.value: v for k, v in METRIC_TYPE_LABELS.items()},
        "test_types": {k.value: v for k, v in TEST_TYPE_LABELS.items()},
        "winner_statuses": {k.value: v for k, v in WINNER_STATUS_LABELS.items()},
        "impacts": {k.value: v for k, v in IMPACT_LABELS.items()},
    }
