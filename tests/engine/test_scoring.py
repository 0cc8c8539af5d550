"""
Farkle Party - Scoring Engine Tests

Tests for selection scoring, bust detection and the best-subset heuristic.
"""

import itertools

import pytest

from src.engine.base import ScoringCategory
from src.engine.scoring import FarkleScoring


class TestSingleDieScoring:
    """Tests for single die scoring (1s and 5s)."""

    def test_single_one_scores_100(self):
        result = FarkleScoring.score_selection((1,))
        assert result.points == 100
        assert result.is_valid

    def test_single_five_scores_50(self):
        result = FarkleScoring.score_selection((5,))
        assert result.points == 50
        assert result.is_valid

    def test_two_ones_and_two_fives(self):
        result = FarkleScoring.score_selection((1, 5, 1, 5))
        assert result.points == 300

    @pytest.mark.parametrize("value", [2, 3, 4, 6])
    def test_non_scoring_single_is_invalid(self, value: int):
        result = FarkleScoring.score_selection((value,))
        assert result.points == 0
        assert not result.is_valid


class TestSets:
    """Tests for three or more of a kind (multiplier rules)."""

    def test_three_ones_scores_1000(self):
        result = FarkleScoring.score_selection((1, 1, 1))
        assert result.points == 1000
        assert result.breakdown[0].category == ScoringCategory.THREE_OF_A_KIND

    @pytest.mark.parametrize("value,expected", [
        (2, 200),
        (3, 300),
        (4, 400),
        (5, 500),
        (6, 600),
    ])
    def test_three_of_kind_scores_value_times_100(self, value: int, expected: int):
        result = FarkleScoring.score_selection((value, value, value))
        assert result.points == expected

    @pytest.mark.parametrize("count,expected", [
        (3, 400),
        (4, 800),
        (5, 1200),
        (6, 1600),
    ])
    def test_fours_multiplier_grows_linearly(self, count: int, expected: int):
        result = FarkleScoring.score_selection((4,) * count)
        assert result.points == expected

    def test_six_ones_scores_4000(self):
        result = FarkleScoring.score_selection((1,) * 6)
        assert result.points == 4000
        assert result.breakdown[0].category == ScoringCategory.SIX_OF_A_KIND

    def test_five_fives_plus_one(self):
        result = FarkleScoring.score_selection((5, 5, 5, 5, 5, 1))
        assert result.points == 1600  # 500 * 3 + 100


class TestSixDicePatterns:
    """Tests for the wholesale six-dice patterns."""

    @pytest.mark.parametrize("dice", [
        (1, 2, 3, 4, 5, 6),
        (6, 4, 2, 5, 3, 1),
        (3, 1, 6, 2, 5, 4),
    ])
    def test_straight_in_any_order(self, dice: tuple):
        result = FarkleScoring.score_selection(dice)
        assert result.points == 1500
        assert result.is_valid
        assert result.breakdown[0].category == ScoringCategory.STRAIGHT

    def test_three_pairs(self):
        result = FarkleScoring.score_selection((2, 2, 4, 4, 6, 6))
        assert result.points == 1500
        assert result.breakdown[0].category == ScoringCategory.THREE_PAIRS

    def test_two_triplets(self):
        result = FarkleScoring.score_selection((1, 1, 1, 4, 4, 4))
        assert result.points == 2500
        assert result.breakdown[0].category == ScoringCategory.TWO_TRIPLETS

    def test_four_of_a_kind_and_pair_reads_as_three_pairs(self):
        result = FarkleScoring.score_selection((4, 4, 4, 4, 2, 2))
        assert result.points == 1500
        assert result.breakdown[0].category == ScoringCategory.THREE_PAIRS

    def test_five_dice_run_is_not_a_straight(self):
        result = FarkleScoring.score_selection((2, 3, 4, 5, 6))
        assert result.points == 0
        assert not result.is_valid


class TestMixedCombinations:
    """Tests for combinations of different scoring patterns."""

    def test_three_ones_plus_two_fives(self):
        result = FarkleScoring.score_selection((1, 1, 1, 5, 5))
        assert result.points == 1100

    def test_three_twos_plus_one_and_five(self):
        result = FarkleScoring.score_selection((2, 2, 2, 1, 5))
        assert result.points == 350

    def test_breakdown_lists_every_component(self):
        result = FarkleScoring.score_selection((2, 2, 2, 1, 5))
        categories = {b.category for b in result.breakdown}
        assert categories == {
            ScoringCategory.THREE_OF_A_KIND,
            ScoringCategory.SINGLE_ONE,
            ScoringCategory.SINGLE_FIVE,
        }
        assert sum(b.points for b in result.breakdown) == result.points

    def test_str_lists_breakdown(self):
        text = str(FarkleScoring.score_selection((1, 5)))
        assert "Total: 150 points" in text


class TestNoPartialCredit:
    """A single non-scoring die voids the whole selection."""

    def test_one_bad_die_poisons_selection(self):
        result = FarkleScoring.score_selection((1, 1, 1, 2))
        assert result.points == 0
        assert not result.is_valid
        assert result.breakdown == ()

    def test_invalid_selections_never_score(self):
        for length in range(1, 5):
            for dice in itertools.product(range(1, 7), repeat=length):
                result = FarkleScoring.score_selection(dice)
                if result.is_valid:
                    assert result.points > 0
                else:
                    assert result.points == 0

    def test_selection_table(self, scoring_selections):
        for name, (dice, expected, valid) in scoring_selections.items():
            result = FarkleScoring.score_selection(dice)
            assert result.points == expected, name
            assert result.is_valid is valid, name

    def test_empty_selection_is_valid_and_worthless(self):
        result = FarkleScoring.score_selection(())
        assert result.is_valid
        assert result.points == 0


class TestBustDetection:
    """Tests for bust detection."""

    def test_bust_rolls(self, bust_rolls):
        for dice in bust_rolls:
            assert FarkleScoring.is_bust(dice) is True, dice

    @pytest.mark.parametrize("dice", [
        (1, 2, 3, 4, 5, 6),
        (2, 2, 4, 4, 6, 6),
        (3, 3, 3, 2, 4, 6),
        (2, 3, 4, 5),
        (1,),
    ])
    def test_scoring_rolls_are_not_bust(self, dice: tuple):
        assert FarkleScoring.is_bust(dice) is False

    def test_empty_roll_is_bust(self):
        assert FarkleScoring.is_bust(()) is True


class TestBestScoringSubset:
    """Tests for the greedy best-subset heuristic."""

    def test_whole_roll_when_valid(self):
        best = FarkleScoring.best_scoring_subset((1, 5, 1))
        assert best.points == 250
        assert best.chosen_values == (1, 5, 1)

    def test_wholesale_pattern_uses_every_die(self):
        best = FarkleScoring.best_scoring_subset((2, 2, 4, 4, 6, 6))
        assert best.points == 1500
        assert len(best.chosen_values) == 6

    def test_sets_then_singles(self):
        best = FarkleScoring.best_scoring_subset((1, 1, 1, 2, 2, 5))
        assert best.points == 1050
        assert best.chosen_values == (1, 1, 1, 5)

    def test_singles_only(self):
        best = FarkleScoring.best_scoring_subset((5, 2, 3, 1, 6, 6))
        assert best.points == 150
        assert best.chosen_values == (1, 5)

    def test_bust_has_no_subset(self):
        best = FarkleScoring.best_scoring_subset((2, 3, 4, 6, 2, 3))
        assert best.points == 0
        assert best.chosen_values == ()

    def test_empty_input(self):
        best = FarkleScoring.best_scoring_subset(())
        assert best.points == 0
        assert best.chosen_values == ()


class TestHotDice:
    def test_all_selectable_selected(self):
        assert FarkleScoring.is_hot_dice(3, 3) is True

    def test_partial_selection(self):
        assert FarkleScoring.is_hot_dice(2, 3) is False

    def test_nothing_selected(self):
        assert FarkleScoring.is_hot_dice(0, 0) is False


class TestInputValidation:
    def test_out_of_range_value_raises(self):
        with pytest.raises(ValueError, match="between 1 and 6"):
            FarkleScoring.score_selection((1, 7))

    def test_more_than_six_dice_raises(self):
        with pytest.raises(ValueError, match="At most 6"):
            FarkleScoring.is_bust((1,) * 7)

    def test_accepts_list(self):
        assert FarkleScoring.score_selection([1, 5]).points == 150
