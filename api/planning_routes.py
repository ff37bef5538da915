from fastapi import APIRouter

from models.requests import SampleSizeRequest, SampleSizeResponse, SignificanceRequest
from models.results import SignificanceResult
from services.significance import calculate_required_sample_size, run_significance_test
from api.depends import CLIENT_AUTH
from config import config

import logging
import math

logger = logging.getLogger(__name__)

# Pre-experiment planning endpoints used by the dashboards
planning_router = APIRouter(
    prefix="/planning",
    tags=["planning"],
    dependencies=[CLIENT_AUTH],
)


# POST /planning/significance
@planning_router.post("/significance", response_model=SignificanceResult)
def significance_route(request: SignificanceRequest):
    """Standalone control vs. treatment z-test."""
    confidence_level = request.confidence_level or config.default_confidence_level
    return run_significance_test(
        control=request.control,
        treatment=request.treatment,
        metric=request.metric,
        confidence_level=confidence_level,
    )


# POST /planning/sample-size
@planning_router.post("/sample-size", response_model=SampleSizeResponse)
def sample_size_route(request: SampleSizeRequest):
    """Sample size per variant needed to detect the given absolute lift."""
    required = calculate_required_sample_size(
        baseline_rate=request.baseline_rate,
        minimum_detectable_effect=request.minimum_detectable_effect,
        power=request.power,
        confidence_level=request.confidence_level,
    )
    if math.isinf(required):
        logger.info("sample size requested for a zero effect (baseline %.2f%%)", request.baseline_rate)

    return SampleSizeResponse(
        required_sample_size=None if math.isinf(required) else required,
        baseline_rate=request.baseline_rate,
        minimum_detectable_effect=request.minimum_detectable_effect,
        power=request.power,
        confidence_level=request.confidence_level,
    )
