from datetime import date

from models.results import NextRunSuggestion, TestResult, TestType
from models.variants import EnrichedVariant, MetricType, VariantResult
from services.ids import TEST_RESULT_PREFIX, IdGenerator, get_id_generator
from services.learning import generate_learnings, generate_next_run_suggestion
from services.metrics import calculate_variant_metrics
from services.winner import DEFAULT_CONFIDENCE_LEVEL, DEFAULT_MIN_SAMPLE_SIZE, determine_winner

import logging

logger = logging.getLogger(__name__)


def enrich_variants(variants: list[VariantResult]) -> list[EnrichedVariant]:
    """Attaches freshly computed metrics to every variant."""
    return [
        EnrichedVariant(**v.model_dump(exclude={"metrics"}), metrics=calculate_variant_metrics(v))
        for v in variants
    ]


def evaluate(
    run_id: str,
    test_type: TestType | str,
    start_date: date,
    end_date: date,
    primary_metric: MetricType | str,
    variants: list[VariantResult],
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
    id_generator: IdGenerator | None = None,
) -> TestResult:
    """
    Evaluates one snapshot of a run's variant counters.

    Metrics -> winner decision -> learnings, packed into a TestResult. Nothing is
    stored; calling again with refreshed counters yields a new, independent result.
    """
    ids = id_generator or get_id_generator()

    enriched = enrich_variants(variants)
    winner = determine_winner(enriched, primary_metric, confidence_level, min_sample_size)
    learnings = generate_learnings(enriched, winner, ids)

    result = TestResult(
        id=ids.new_id(TEST_RESULT_PREFIX),
        run_id=run_id,
        test_type=test_type,
        start_date=start_date,
        end_date=end_date,
        primary_metric=primary_metric,
        variants=enriched,
        winner=winner,
        confidence=winner.confidence,
        sample_size=sum(v.sample_size for v in variants),
        learnings=learnings,
        created_at=ids.now(),
    )
    logger.info("evaluated run %s as %s: result id %s, %d learnings",
                run_id, winner.status.value, result.id, len(learnings))
    return result


def evaluate_with_suggestion(
    run_id: str,
    test_type: TestType | str,
    start_date: date,
    end_date: date,
    primary_metric: MetricType | str,
    variants: list[VariantResult],
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL,
    min_sample_size: int = DEFAULT_MIN_SAMPLE_SIZE,
    id_generator: IdGenerator | None = None,
) -> tuple[TestResult, NextRunSuggestion | None]:
    """`evaluate` plus the suggestion for the run that should follow."""
    result = evaluate(
        run_id,
        test_type,
        start_date,
        end_date,
        primary_metric,
        variants,
        confidence_level=confidence_level,
        min_sample_size=min_sample_size,
        id_generator=id_generator,
    )
    suggestion = generate_next_run_suggestion(run_id, result.winner, result.variants, id_generator)
    return result, suggestion
