import math
import unittest

from models.results import (
    ChangeTarget,
    Impact,
    SuggestionType,
    WinnerDecision,
    WinnerStatus,
)
from models.variants import VariantResult
from services.ids import SequentialIdGenerator
from services.learning import generate_learnings, generate_next_run_suggestion


def make_variant(variant_id: str, is_control: bool = False, clicks: int = 0, impressions: int = 0,
                 conversions: int = 0, spend: float = 0.0) -> VariantResult:
    return VariantResult(
        variant_id=variant_id,
        variant_name=variant_id.title(),
        is_control=is_control,
        sample_size=max(clicks, 1),
        conversions=conversions,
        clicks=clicks,
        impressions=impressions,
        spend=spend,
        revenue=0.0,
    )


def decision(status: WinnerStatus, **kwargs) -> WinnerDecision:
    data = dict(status=status, confidence=0.5, reason="test")
    data.update(kwargs)
    return WinnerDecision(**data)


TIE = decision(WinnerStatus.TIE)


class TestLearnings(unittest.TestCase):

    def setUp(self):
        self.ids = SequentialIdGenerator()

    def test_winner_summary(self):
        variants = [make_variant("control", is_control=True), make_variant("treatment")]
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=25.0, confidence=0.99)

        learnings = generate_learnings(variants, winner, self.ids)

        self.assertEqual(len(learnings), 1)
        learning = learnings[0]
        self.assertEqual(learning.id, "learn_0001")
        self.assertIn("Treatment", learning.title)
        self.assertIn("25.0%", learning.description)
        self.assertEqual(learning.impact, Impact.HIGH)
        self.assertTrue(learning.actionable)
        self.assertEqual(learning.metadata["improvement_percent"], 25.0)

    def test_small_win_is_medium_impact(self):
        variants = [make_variant("control", is_control=True), make_variant("treatment")]
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=12.0, confidence=0.97)

        learnings = generate_learnings(variants, winner, self.ids)

        self.assertEqual(learnings[0].impact, Impact.MEDIUM)

    def test_no_winner_summary_without_a_winner(self):
        variants = [make_variant("control", is_control=True), make_variant("treatment")]
        self.assertEqual(generate_learnings(variants, TIE, self.ids), [])

    def test_wide_ctr_spread(self):
        variants = [
            make_variant("control", is_control=True, clicks=100, impressions=10000),  # 1%
            make_variant("treatment", clicks=300, impressions=10000),  # 3%
        ]

        learnings = generate_learnings(variants, TIE, self.ids)

        self.assertEqual(len(learnings), 1)
        self.assertEqual(learnings[0].impact, Impact.HIGH)
        self.assertEqual(learnings[0].metadata["best_variant"], "Treatment")
        self.assertEqual(learnings[0].metadata["worst_variant"], "Control")
        self.assertAlmostEqual(learnings[0].metadata["ctr_difference"], 2.0)

    def test_moderate_ctr_spread_is_medium_impact(self):
        variants = [
            make_variant("control", is_control=True, clicks=100, impressions=10000),  # 1%
            make_variant("treatment", clicks=170, impressions=10000),  # 1.7%
        ]

        learnings = generate_learnings(variants, TIE, self.ids)

        self.assertEqual(learnings[0].impact, Impact.MEDIUM)

    def test_narrow_ctr_spread_is_ignored(self):
        variants = [
            make_variant("control", is_control=True, clicks=100, impressions=10000),  # 1%
            make_variant("treatment", clicks=140, impressions=10000),  # 1.4%
        ]
        self.assertEqual(generate_learnings(variants, TIE, self.ids), [])

    def test_cpa_efficiency_spread(self):
        variants = [
            make_variant("control", is_control=True, conversions=10, spend=1000.0),  # CPA 100
            make_variant("treatment", conversions=20, spend=1000.0),  # CPA 50
            make_variant("no_sales", conversions=0, spend=1000.0),  # unbounded, left out
        ]

        learnings = generate_learnings(variants, TIE, self.ids)

        self.assertEqual(len(learnings), 1)
        learning = learnings[0]
        self.assertEqual(learning.impact, Impact.HIGH)
        self.assertEqual(learning.metadata["best_variant"], "Treatment")
        self.assertEqual(learning.metadata["worst_variant"], "Control")
        self.assertAlmostEqual(learning.metadata["cpa_difference_percent"], 100.0)

    def test_free_conversions_are_an_unbounded_cpa_spread(self):
        variants = [
            make_variant("free", is_control=True, conversions=10, spend=0.0),  # CPA 0
            make_variant("paid", conversions=10, spend=1000.0),  # CPA 100
        ]

        learnings = generate_learnings(variants, TIE, self.ids)

        self.assertEqual(len(learnings), 1)
        learning = learnings[0]
        self.assertEqual(learning.impact, Impact.HIGH)
        self.assertEqual(learning.metadata["best_variant"], "Free")
        self.assertEqual(learning.metadata["worst_variant"], "Paid")
        self.assertEqual(learning.metadata["cpa_difference_percent"], math.inf)
        self.assertIn("at no cost", learning.description)
        self.assertIsNone(learning.model_dump(mode="json")["metadata"]["cpa_difference_percent"])

    def test_all_free_conversions_have_no_cpa_spread(self):
        variants = [
            make_variant("control", is_control=True, conversions=10, spend=0.0),
            make_variant("treatment", conversions=20, spend=0.0),
        ]
        self.assertEqual(generate_learnings(variants, TIE, self.ids), [])

    def test_unbounded_win_is_high_impact(self):
        variants = [make_variant("control", is_control=True), make_variant("treatment")]
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=math.inf, confidence=0.99)

        learnings = generate_learnings(variants, winner, self.ids)

        self.assertEqual(learnings[0].impact, Impact.HIGH)
        self.assertIn("unbounded margin", learnings[0].description)

    def test_cpa_needs_two_finite_values(self):
        variants = [
            make_variant("control", is_control=True, conversions=10, spend=1000.0),
            make_variant("treatment", conversions=0, spend=1000.0),
        ]
        self.assertEqual(generate_learnings(variants, TIE, self.ids), [])

    def test_rules_fire_independently_in_order(self):
        variants = [
            make_variant("control", is_control=True, clicks=100, impressions=10000, conversions=10, spend=1000.0),
            make_variant("treatment", clicks=300, impressions=10000, conversions=30, spend=1000.0),
        ]
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=30.0, confidence=0.99)

        learnings = generate_learnings(variants, winner, self.ids)

        self.assertEqual([l.id for l in learnings], ["learn_0001", "learn_0002", "learn_0003"])
        self.assertIn("winner", learnings[0].title)
        self.assertIn("CTR", learnings[1].title)
        self.assertIn("CPA", learnings[2].title)

    def test_decision_is_not_modified(self):
        variants = [make_variant("control", is_control=True), make_variant("treatment")]
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=25.0, confidence=0.99)
        before = winner.model_dump()

        generate_learnings(variants, winner, self.ids)
        generate_next_run_suggestion("run_1", winner, variants, self.ids)

        self.assertEqual(winner.model_dump(), before)


class TestNextRunSuggestion(unittest.TestCase):

    def setUp(self):
        self.ids = SequentialIdGenerator()
        self.variants = [make_variant("control", is_control=True), make_variant("treatment")]

    def test_insufficient_data_asks_for_more_budget_and_time(self):
        suggestion = generate_next_run_suggestion(
            "run_1", decision(WinnerStatus.INSUFFICIENT_DATA, confidence=0), self.variants, self.ids
        )
        self.assertEqual(suggestion.id, "suggest_0001")
        self.assertEqual(suggestion.source_run_id, "run_1")
        self.assertEqual(suggestion.type, SuggestionType.ITERATE)
        self.assertEqual(
            [c.target for c in suggestion.suggested_changes],
            [ChangeTarget.BUDGET, ChangeTarget.SCHEDULE],
        )
        self.assertEqual(suggestion.priority, Impact.HIGH)

    def test_winner_iterates_on_the_winner(self):
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=30.0, confidence=0.9)

        suggestion = generate_next_run_suggestion("run_1", winner, self.variants, self.ids)

        self.assertEqual(suggestion.type, SuggestionType.ITERATE)
        self.assertIn("Treatment", suggestion.description)
        self.assertAlmostEqual(suggestion.expected_improvement, 15.0)
        self.assertAlmostEqual(suggestion.confidence, 0.72)
        self.assertEqual(
            [c.target for c in suggestion.suggested_changes],
            [ChangeTarget.HEADLINE, ChangeTarget.CTA],
        )

    def test_unbounded_win_expects_the_fallback_improvement(self):
        winner = decision(WinnerStatus.WINNER, winner_variant_id="treatment", improvement=math.inf, confidence=0.9)

        suggestion = generate_next_run_suggestion("run_1", winner, self.variants, self.ids)

        self.assertEqual(suggestion.expected_improvement, 10.0)

    def test_unknown_winner_has_no_suggestion(self):
        winner = decision(WinnerStatus.WINNER, winner_variant_id="archived", improvement=30.0, confidence=0.9)
        self.assertIsNone(generate_next_run_suggestion("run_1", winner, self.variants, self.ids))

    def test_tie_pivots(self):
        suggestion = generate_next_run_suggestion("run_1", TIE, self.variants, self.ids)

        self.assertEqual(suggestion.type, SuggestionType.PIVOT)
        self.assertEqual(suggestion.expected_improvement, 15)
        self.assertEqual(suggestion.confidence, 0.5)
        self.assertEqual(suggestion.priority, Impact.MEDIUM)

    def test_loser_has_no_suggestion(self):
        loser = decision(WinnerStatus.LOSER, winner_variant_id="control", confidence=0.99)
        self.assertIsNone(generate_next_run_suggestion("run_1", loser, self.variants, self.ids))


if __name__ == "__main__":
    unittest.main()
