"""
Learnings and next-run suggestions.

Everything here is presentation over a decision that has already been made:
the WinnerDecision is read, never modified.
"""
from models.results import (
    ChangeTarget,
    Impact,
    Learning,
    LearningType,
    NextRunSuggestion,
    SuggestedChange,
    SuggestionType,
    WinnerDecision,
    WinnerStatus,
)
from models.variants import VariantResult
from services.ids import LEARNING_PREFIX, SUGGESTION_PREFIX, IdGenerator, get_id_generator
from services.metrics import calculate_variant_metrics
from services.winner import format_improvement

import logging
import math

logger = logging.getLogger(__name__)

# Thresholds for emitting a learning
HIGH_IMPACT_IMPROVEMENT = 20.0  # percent
CTR_SPREAD_THRESHOLD = 0.5  # percentage points
CTR_SPREAD_HIGH_IMPACT = 1.0  # percentage points
CPA_SPREAD_THRESHOLD = 30.0  # percent

# Suggestion figures
WINNER_EXPECTED_IMPROVEMENT_FACTOR = 0.5
WINNER_CONFIDENCE_FACTOR = 0.8
WINNER_FALLBACK_EXPECTED_IMPROVEMENT = 10.0
PIVOT_EXPECTED_IMPROVEMENT = 15.0
DEFAULT_SUGGESTION_CONFIDENCE = 0.5


def _winner_learning(variants: list[VariantResult], winner: WinnerDecision, ids: IdGenerator) -> Learning | None:
    if winner.status != WinnerStatus.WINNER or not winner.winner_variant_id:
        return None

    winning = next((v for v in variants if v.variant_id == winner.winner_variant_id), None)
    if winning is None:
        return None

    improvement = winner.improvement or 0.0
    return Learning(
        id=ids.new_id(LEARNING_PREFIX),
        type=LearningType.GENERAL,
        title=f"{winning.variant_name} is the winner",
        description=f"{winning.variant_name} improved on control by {format_improvement(improvement)}",
        impact=Impact.HIGH if improvement > HIGH_IMPACT_IMPROVEMENT else Impact.MEDIUM,
        actionable=True,
        suggested_action="Roll out the winning variant and plan a follow-up test to improve on it",
        metadata={
            "improvement_percent": winner.improvement,
            "confidence": winner.confidence,
        },
    )


def _ctr_learning(variants: list[VariantResult], ids: IdGenerator) -> Learning | None:
    if not variants:
        return None

    by_ctr = sorted(variants, key=lambda v: calculate_variant_metrics(v).ctr, reverse=True)
    best, worst = by_ctr[0], by_ctr[-1]
    spread = calculate_variant_metrics(best).ctr - calculate_variant_metrics(worst).ctr

    if spread <= CTR_SPREAD_THRESHOLD:
        return None

    return Learning(
        id=ids.new_id(LEARNING_PREFIX),
        type=LearningType.GENERAL,
        title="Large CTR gap between variants",
        description=(
            f"Best CTR ({best.variant_name}) and worst CTR ({worst.variant_name}) "
            f"differ by {spread:.2f} percentage points"
        ),
        impact=Impact.HIGH if spread > CTR_SPREAD_HIGH_IMPACT else Impact.MEDIUM,
        actionable=True,
        suggested_action="Review the creative elements of the high-CTR variant and reuse them in the next test",
        metadata={
            "best_variant": best.variant_name,
            "worst_variant": worst.variant_name,
            "ctr_difference": spread,
        },
    )


def _cpa_learning(variants: list[VariantResult], ids: IdGenerator) -> Learning | None:
    # Variants without conversions have an unbounded CPA and are left out
    finite = [v for v in variants if math.isfinite(calculate_variant_metrics(v).cpa)]
    if len(finite) < 2:
        return None

    by_cpa = sorted(finite, key=lambda v: calculate_variant_metrics(v).cpa)
    best, worst = by_cpa[0], by_cpa[-1]
    best_cpa = calculate_variant_metrics(best).cpa
    worst_cpa = calculate_variant_metrics(worst).cpa

    if worst_cpa == 0:
        return None

    # Conversions at no spend are unboundedly cheaper than any paid ones
    spread = (worst_cpa - best_cpa) / best_cpa * 100 if best_cpa > 0 else math.inf
    if spread <= CPA_SPREAD_THRESHOLD:
        return None

    if math.isinf(spread):
        description = f"{best.variant_name} acquires conversions at no cost, unlike {worst.variant_name}"
    else:
        description = f"{best.variant_name} acquires conversions {spread:.0f}% more efficiently than {worst.variant_name}"

    return Learning(
        id=ids.new_id(LEARNING_PREFIX),
        type=LearningType.GENERAL,
        title="Large gap in CPA efficiency",
        description=description,
        impact=Impact.HIGH,
        actionable=True,
        suggested_action="Find what makes the efficient variant work and shift budget towards it",
        metadata={
            "best_variant": best.variant_name,
            "worst_variant": worst.variant_name,
            "cpa_difference_percent": spread,
        },
    )


def generate_learnings(
    variants: list[VariantResult],
    winner: WinnerDecision,
    id_generator: IdGenerator | None = None,
) -> list[Learning]:
    """
    Derives learnings from the variants and the decision.

    Rules are independent of each other, so any subset may fire. Order of the
    result: winner summary, CTR spread, CPA spread.
    """
    ids = id_generator or get_id_generator()

    candidates = (
        _winner_learning(variants, winner, ids),
        _ctr_learning(variants, ids),
        _cpa_learning(variants, ids),
    )
    learnings = [learning for learning in candidates if learning is not None]
    logger.debug("generated %d learnings for decision %s", len(learnings), winner.status.value)
    return learnings


def generate_next_run_suggestion(
    source_run_id: str,
    winner: WinnerDecision,
    variants: list[VariantResult],
    id_generator: IdGenerator | None = None,
) -> NextRunSuggestion | None:
    """
    Maps the decision status to the shape of the next experiment.

    insufficient data -> iterate with more budget and time, winner -> iterate on
    the winner, tie -> pivot to something bolder, loser -> no suggestion.
    """
    ids = id_generator or get_id_generator()

    if winner.status == WinnerStatus.INSUFFICIENT_DATA:
        return NextRunSuggestion(
            id=ids.new_id(SUGGESTION_PREFIX),
            source_run_id=source_run_id,
            type=SuggestionType.ITERATE,
            title="Collect a larger sample",
            description="Gather more data to reach a statistically significant result",
            suggested_changes=[
                SuggestedChange(
                    target=ChangeTarget.BUDGET,
                    current_value="Current budget",
                    suggested_value="Double the budget",
                    rationale="Reach a sufficient sample size",
                ),
                SuggestedChange(
                    target=ChangeTarget.SCHEDULE,
                    current_value="Current duration",
                    suggested_value="Extend the test duration",
                    rationale="Collect more data",
                ),
            ],
            expected_improvement=0,
            confidence=DEFAULT_SUGGESTION_CONFIDENCE,
            priority=Impact.HIGH,
        )

    if winner.status == WinnerStatus.WINNER and winner.winner_variant_id:
        winning = next((v for v in variants if v.variant_id == winner.winner_variant_id), None)
        if winning is None:
            logger.warning("winner %s is not among the evaluated variants, no suggestion", winner.winner_variant_id)
            return None

        if winner.improvement and math.isfinite(winner.improvement):
            expected = winner.improvement * WINNER_EXPECTED_IMPROVEMENT_FACTOR
        else:
            expected = WINNER_FALLBACK_EXPECTED_IMPROVEMENT

        return NextRunSuggestion(
            id=ids.new_id(SUGGESTION_PREFIX),
            source_run_id=source_run_id,
            type=SuggestionType.ITERATE,
            title="Optimise the winning variant",
            description=f"A/B test variations built on {winning.variant_name} to improve further",
            suggested_changes=[
                SuggestedChange(
                    target=ChangeTarget.HEADLINE,
                    current_value="Winning headline",
                    suggested_value="Test headline variations",
                    rationale="Optimise further from the winner",
                ),
                SuggestedChange(
                    target=ChangeTarget.CTA,
                    current_value="Winning CTA",
                    suggested_value="Test CTA wording and colour",
                    rationale="Improve conversion rate further",
                ),
            ],
            expected_improvement=expected,
            confidence=winner.confidence * WINNER_CONFIDENCE_FACTOR,
            priority=Impact.HIGH,
        )

    if winner.status == WinnerStatus.TIE:
        return NextRunSuggestion(
            id=ids.new_id(SUGGESTION_PREFIX),
            source_run_id=source_run_id,
            type=SuggestionType.PIVOT,
            title="Test a new approach",
            description="The current variants show no significant difference, test bolder changes",
            suggested_changes=[
                SuggestedChange(
                    target=ChangeTarget.HEADLINE,
                    current_value="Existing headlines",
                    suggested_value="Test entirely different messaging",
                    rationale="The current approach produced no difference",
                ),
                SuggestedChange(
                    target=ChangeTarget.IMAGE,
                    current_value="Existing visuals",
                    suggested_value="Test a different visual style",
                    rationale="Aim for a larger impact",
                ),
            ],
            expected_improvement=PIVOT_EXPECTED_IMPROVEMENT,
            confidence=DEFAULT_SUGGESTION_CONFIDENCE,
            priority=Impact.MEDIUM,
        )

    # Control won: keep it, nothing to iterate on
    return None
