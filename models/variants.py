from pydantic import BaseModel, Field, field_serializer
from enum import Enum
import math

# --- Pydantic Models for per-variant data ---

class MetricType(str, Enum):
    """Metrics a run can be judged on."""
    CVR = "cvr"
    CTR = "ctr"
    CPA = "cpa"
    ROAS = "roas"
    REVENUE = "revenue"
    CPC = "cpc"


class VariantResult(BaseModel):
    """Raw counters of one variant over the run's observation window."""
    variant_id: str
    variant_name: str
    is_control: bool = False
    sample_size: int = Field(0, ge=0, description="Users (or sessions) exposed to the variant.")
    conversions: int = Field(0, ge=0)
    clicks: int = Field(0, ge=0)
    impressions: int = Field(0, ge=0)
    spend: float = Field(0.0, ge=0, description="Ad spend in account currency.")
    revenue: float = Field(0.0, ge=0)

    class Config:
        frozen = True


class VariantMetrics(BaseModel):
    """Rates derived from a VariantResult. Always recomputed, never stored."""
    cvr: float  # conversions / clicks * 100
    ctr: float  # clicks / impressions * 100
    cpa: float  # spend / conversions, inf when there are no conversions
    roas: float  # revenue / spend
    cpc: float  # spend / clicks
    cpm: float  # spend / impressions * 1000

    @field_serializer("cpa", when_used="json")
    def serialize_cpa(self, value: float) -> float | None:
        # JSON has no Infinity; an unbounded CPA goes out as null
        return None if math.isinf(value) else value


class EnrichedVariant(VariantResult):
    """A VariantResult together with the metrics computed for it."""
    metrics: VariantMetrics
