"""
Farkle Party - Scoring Engine

Pure scoring functions for classic six-dice Farkle. All methods are
stateless class methods that operate on immutable inputs.

Scoring Rules (evaluated in this order):
    - Empty selection: 0 points, valid
    - 1-2-3-4-5-6 (Straight): 1,500 points
    - Three pairs: 1,500 points
    - Two triplets: 2,500 points
    - Three 1s: 1,000 points; three of X (2-6): X x 100 points
    - Four / five / six of a kind: three-of-a-kind x 2 / x 3 / x 4
    - Single 1: 100 points, single 5: 50 points
    - Any die left unscored voids the whole selection
"""

from collections import Counter
from typing import Sequence

from src.engine.base import (
    NUM_DICE,
    BestSubset,
    ScoringBreakdown,
    ScoringCategory,
    SelectionScore,
)
from src.engine.validators import validate_dice_values


class FarkleScoring:
    """
    Stateless scoring engine.

    All methods are class methods operating on immutable data.
    """

    # Scoring values
    SINGLE_ONE_POINTS = 100
    SINGLE_FIVE_POINTS = 50
    THREE_ONES_POINTS = 1000
    STRAIGHT_POINTS = 1500
    THREE_PAIRS_POINTS = 1500
    TWO_TRIPLETS_POINTS = 2500

    # n-of-a-kind multiplier over the three-of-a-kind base
    SET_MULTIPLIERS = {3: 1, 4: 2, 5: 3, 6: 4}
    SET_CATEGORIES = {
        3: ScoringCategory.THREE_OF_A_KIND,
        4: ScoringCategory.FOUR_OF_A_KIND,
        5: ScoringCategory.FIVE_OF_A_KIND,
        6: ScoringCategory.SIX_OF_A_KIND,
    }

    @classmethod
    def score_selection(cls, values: Sequence[int]) -> SelectionScore:
        """
        Score a tentative selection of dice.

        Every die must be consumed by a combination; a single non-scoring
        die makes the whole selection invalid and worth 0.

        Args:
            values: Face values of the selected dice, in any order

        Returns:
            SelectionScore with points, validity and breakdown
        """
        dice = validate_dice_values(values)

        if not dice:
            return SelectionScore(points=0, is_valid=True)

        counts = Counter(dice)

        wholesale = cls._check_wholesale(dice, counts)
        if wholesale is not None:
            return SelectionScore(
                points=wholesale.points,
                is_valid=True,
                breakdown=(wholesale,),
            )

        breakdown = cls._check_sets(counts)
        breakdown.extend(cls._check_singles(counts))

        if any(count > 0 for count in counts.values()):
            return SelectionScore(points=0, is_valid=False)

        return SelectionScore(
            points=sum(item.points for item in breakdown),
            is_valid=True,
            breakdown=tuple(breakdown),
        )

    @classmethod
    def _check_wholesale(
        cls,
        dice: tuple[int, ...],
        counts: Counter[int]
    ) -> ScoringBreakdown | None:
        """
        Check the six-dice patterns that consume every die.

        A pair is two dice of one face, so four of a kind plus a pair
        reads as three pairs.
        """
        if len(dice) != NUM_DICE:
            return None

        ordered = tuple(sorted(dice))

        if len(counts) == NUM_DICE:
            return ScoringBreakdown(
                category=ScoringCategory.STRAIGHT,
                dice_values=ordered,
                points=cls.STRAIGHT_POINTS,
                description="Straight (1-2-3-4-5-6)"
            )

        if all(count in (2, 4) for count in counts.values()):
            return ScoringBreakdown(
                category=ScoringCategory.THREE_PAIRS,
                dice_values=ordered,
                points=cls.THREE_PAIRS_POINTS,
                description="Three Pairs"
            )

        if sorted(counts.values()) == [3, 3]:
            return ScoringBreakdown(
                category=ScoringCategory.TWO_TRIPLETS,
                dice_values=ordered,
                points=cls.TWO_TRIPLETS_POINTS,
                description="Two Triplets"
            )

        return None

    @classmethod
    def _check_sets(cls, remaining: Counter[int]) -> list[ScoringBreakdown]:
        """Score three or more of a kind and consume those dice."""
        breakdown: list[ScoringBreakdown] = []

        for face_value in range(1, 7):
            count = remaining[face_value]
            if count < 3:
                continue

            base_points = cls.THREE_ONES_POINTS if face_value == 1 else face_value * 100
            points = base_points * cls.SET_MULTIPLIERS[count]
            remaining[face_value] = 0

            breakdown.append(ScoringBreakdown(
                category=cls.SET_CATEGORIES[count],
                dice_values=tuple([face_value] * count),
                points=points,
                description=f"{count}x {face_value}s"
            ))

        return breakdown

    @classmethod
    def _check_singles(cls, remaining: Counter[int]) -> list[ScoringBreakdown]:
        """Score leftover 1s and 5s and consume them."""
        breakdown: list[ScoringBreakdown] = []

        singles = (
            (1, cls.SINGLE_ONE_POINTS, ScoringCategory.SINGLE_ONE),
            (5, cls.SINGLE_FIVE_POINTS, ScoringCategory.SINGLE_FIVE),
        )
        for face_value, each, category in singles:
            count = remaining[face_value]
            if count == 0:
                continue
            remaining[face_value] = 0
            breakdown.append(ScoringBreakdown(
                category=category,
                dice_values=tuple([face_value] * count),
                points=count * each,
                description=f"{count}x Single {face_value}{'s' if count > 1 else ''}"
            ))

        return breakdown

    @classmethod
    def is_bust(cls, values: Sequence[int]) -> bool:
        """
        Check if a roll is a bust (no subset could ever score).

        Args:
            values: Freshly rolled dice values

        Returns:
            True if the roll has no 1, no 5, no triplet or better,
            no straight and no three pairs. An empty roll is a bust.
        """
        dice = validate_dice_values(values)
        if not dice:
            return True

        counts = Counter(dice)
        if counts[1] or counts[5]:
            return False
        if any(count >= 3 for count in counts.values()):
            return False
        return cls._check_wholesale(dice, counts) is None

    @classmethod
    def best_scoring_subset(cls, values: Sequence[int]) -> BestSubset:
        """
        Pick a scoring subset of a roll with a fixed greedy heuristic.

        Order of attempts: the whole roll; the six-dice wholesale
        patterns; then every n-of-a-kind group (n >= 3) plus the
        remaining 1s and 5s. This is deliberately not an optimal
        subset search, auto-selection and banking both depend on it.

        Args:
            values: Face values of the selectable dice

        Returns:
            BestSubset with points and the chosen face values
        """
        dice = validate_dice_values(values)
        if not dice:
            return BestSubset(points=0, chosen_values=())

        whole = cls.score_selection(dice)
        if whole.is_valid:
            return BestSubset(points=whole.points, chosen_values=dice)

        counts = Counter(dice)
        wholesale = cls._check_wholesale(dice, counts)
        if wholesale is not None:
            return BestSubset(points=wholesale.points, chosen_values=dice)

        chosen: list[int] = []
        for face_value in range(1, 7):
            if counts[face_value] >= 3:
                chosen.extend([face_value] * counts[face_value])
                counts[face_value] = 0
        chosen.extend([1] * counts[1])
        chosen.extend([5] * counts[5])

        result = cls.score_selection(chosen)
        return BestSubset(points=result.points, chosen_values=tuple(chosen))

    @classmethod
    def is_hot_dice(cls, selected_count: int, selectable_count: int) -> bool:
        """True when a selection covers every die still in play."""
        return selected_count > 0 and selected_count == selectable_count
