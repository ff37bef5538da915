from fastapi import APIRouter, status

from models.requests import EvaluationRequest, EvaluationResponse
from services.evaluation import evaluate_with_suggestion
from services.ids import IdGenerator
from api.depends import CLIENT_AUTH, ID_GENERATOR
from config import config

import logging

logger = logging.getLogger(__name__)

evaluation_router = APIRouter(
    prefix="/evaluations",
    tags=["evaluations"],
    dependencies=[CLIENT_AUTH],
)


# POST /evaluations
@evaluation_router.post("", response_model=EvaluationResponse, status_code=status.HTTP_200_OK)
def evaluate_run_route(
    request: EvaluationRequest,
    id_generator: IdGenerator = ID_GENERATOR,
):
    """
    Evaluate one snapshot of a run's variant counters.

    Returns the TestResult (winner decision, enriched variants, learnings) and
    the suggested next run. Nothing is stored; the caller owns persistence.
    """
    confidence_level = request.confidence_level or config.default_confidence_level
    min_sample_size = request.min_sample_size if request.min_sample_size is not None else config.min_sample_size

    logger.info("evaluate run %s: %d variants, metric=%s, confidence=%s, min_sample_size=%d",
                request.run_id, len(request.variants), request.primary_metric.value,
                confidence_level, min_sample_size)

    result, suggestion = evaluate_with_suggestion(
        run_id=request.run_id,
        test_type=request.test_type,
        start_date=request.start_date,
        end_date=request.end_date,
        primary_metric=request.primary_metric,
        variants=request.variants,
        confidence_level=confidence_level,
        min_sample_size=min_sample_size,
        id_generator=id_generator,
    )
    return EvaluationResponse(result=result, next_run_suggestion=suggestion)
