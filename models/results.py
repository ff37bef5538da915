from pydantic import BaseModel, Field, field_serializer
from datetime import date, datetime
from enum import Enum
from typing import Any
import math

from models.variants import EnrichedVariant, MetricType


class TestType(str, Enum):
    AB_TEST = "ab_test"
    MULTIVARIATE = "multivariate"
    BANDIT = "bandit"


class WinnerStatus(str, Enum):
    WINNER = "winner"
    LOSER = "loser"
    TIE = "tie"
    INSUFFICIENT_DATA = "insufficient_data"


class Impact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LearningType(str, Enum):
    HEADLINE_PERFORMANCE = "headline_performance"
    CTA_PERFORMANCE = "cta_performance"
    IMAGE_PERFORMANCE = "image_performance"
    COLOR_PERFORMANCE = "color_performance"
    AUDIENCE_INSIGHT = "audience_insight"
    TIMING_INSIGHT = "timing_insight"
    PLACEMENT_INSIGHT = "placement_insight"
    GENERAL = "general"


class SuggestionType(str, Enum):
    ITERATE = "iterate"
    EXPAND = "expand"
    PIVOT = "pivot"


class ChangeTarget(str, Enum):
    HEADLINE = "headline"
    CTA = "cta"
    IMAGE = "image"
    TARGETING = "targeting"
    BUDGET = "budget"
    SCHEDULE = "schedule"


class SignificanceResult(BaseModel):
    """Outcome of one control vs. treatment z-test."""
    is_significant: bool
    p_value: float
    confidence_level: float
    standard_error: float  # pooled, as a proportion
    z_score: float
    minimum_detectable_effect: float  # percentage points at the current sample size


class WinnerDecision(BaseModel):
    """The single verdict produced for an evaluation."""
    status: WinnerStatus
    winner_variant_id: str | None = None
    # Percent, positive means the treatment did better than control
    improvement: float | None = None
    confidence: float = Field(..., ge=0, le=1)
    reason: str

    @field_serializer("improvement", when_used="json")
    def serialize_improvement(self, value: float | None) -> float | None:
        # Unbounded against a zero control; JSON has no Infinity
        return None if value is None or math.isinf(value) else value


class Learning(BaseModel):
    """A human readable insight. Never fed back into the decision."""
    id: str
    type: LearningType = LearningType.GENERAL
    title: str
    description: str
    impact: Impact
    actionable: bool = True
    suggested_action: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict, description="Figures the learning was derived from.")

    @field_serializer("metadata", when_used="json")
    def serialize_metadata(self, value: dict[str, Any]) -> dict[str, Any]:
        return {
            key: None if isinstance(item, float) and math.isinf(item) else item
            for key, item in value.items()
        }


class SuggestedChange(BaseModel):
    target: ChangeTarget
    current_value: str
    suggested_value: str
    rationale: str


class NextRunSuggestion(BaseModel):
    """Shape of the follow-up experiment recommended after an evaluation."""
    id: str
    source_run_id: str
    type: SuggestionType
    title: str
    description: str
    suggested_changes: list[SuggestedChange]
    expected_improvement: float
    confidence: float
    priority: Impact


class TestResult(BaseModel):
    """Aggregate record handed to the run lifecycle, notification and audit services."""
    id: str
    run_id: str
    test_type: TestType
    start_date: date
    end_date: date
    primary_metric: MetricType
    variants: list[EnrichedVariant]
    winner: WinnerDecision
    confidence: float
    sample_size: int
    learnings: list[Learning]
    created_at: datetime
