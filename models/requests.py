from pydantic import BaseModel, Field, model_validator
from datetime import date

from models.results import NextRunSuggestion, TestResult, TestType
from models.variants import MetricType, VariantResult

# --- Request/Response schemas of the HTTP layer ---

class EvaluationRequest(BaseModel):
    """Schema for POST /evaluations."""
    run_id: str
    test_type: TestType = TestType.AB_TEST
    start_date: date
    end_date: date
    primary_metric: MetricType = MetricType.CVR
    variants: list[VariantResult]
    confidence_level: float | None = Field(None, gt=0, lt=1, description="Defaults to DEFAULT_CONFIDENCE_LEVEL.")
    min_sample_size: int | None = Field(None, ge=0, description="Defaults to MIN_SAMPLE_SIZE.")

    @model_validator(mode="after")
    def check_run_window_and_control(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date.")
        controls = [v.variant_id for v in self.variants if v.is_control]
        if len(controls) > 1:
            raise ValueError(f"Only one control variant allowed, got {len(controls)}: {', '.join(controls)}.")
        return self


class EvaluationResponse(BaseModel):
    """Schema returned by POST /evaluations."""
    result: TestResult
    next_run_suggestion: NextRunSuggestion | None = None


class SignificanceRequest(BaseModel):
    """Schema for POST /planning/significance."""
    control: VariantResult
    treatment: VariantResult
    metric: MetricType = MetricType.CVR
    confidence_level: float | None = Field(None, gt=0, lt=1)


class SampleSizeRequest(BaseModel):
    """Schema for POST /planning/sample-size. Rates are percentages (10 means 10%)."""
    baseline_rate: float = Field(..., ge=0, le=100)
    minimum_detectable_effect: float = Field(..., description="Absolute lift in percentage points.")
    power: float = Field(0.8, gt=0, lt=1)
    confidence_level: float = Field(0.95, gt=0, lt=1)

    @model_validator(mode="after")
    def check_target_rate(self):
        target_rate = self.baseline_rate + self.minimum_detectable_effect
        if not 0 <= target_rate <= 100:
            raise ValueError(f"baseline_rate + minimum_detectable_effect must lie in [0, 100], got {target_rate}.")
        return self


class SampleSizeResponse(BaseModel):
    # None when the effect is zero and no finite sample can detect it
    required_sample_size: int | None
    baseline_rate: float
    minimum_detectable_effect: float
    power: float
    confidence_level: float
