"""
Farkle Party - Test Configuration and Fixtures

Common fixtures and test data for all test modules.
"""

from dataclasses import replace
from typing import Callable, Sequence

import pytest

from src.engine.base import (
    Die,
    FinalRound,
    Game,
    GameConfig,
    GamePhase,
    NoFinalRound,
    Player,
    Selection,
    Turn,
    TurnStatus,
)
from src.engine.scoring import FarkleScoring
from src.engine.state import create_new_game, create_player


# =============================================================================
# SCORING TEST DATA
# =============================================================================

@pytest.fixture
def scoring_selections() -> dict[str, tuple[tuple[int, ...], int, bool]]:
    """
    Common selections with expected scores.

    Returns:
        Dict mapping name to (dice_values, expected_points, expected_valid)
    """
    return {
        "empty": ((), 0, True),
        "single_one": ((1,), 100, True),
        "single_five": ((5,), 50, True),
        "one_and_five": ((1, 5), 150, True),
        "three_ones": ((1, 1, 1), 1000, True),
        "three_twos": ((2, 2, 2), 200, True),
        "four_threes": ((3, 3, 3, 3), 600, True),
        "five_fours": ((4, 4, 4, 4, 4), 1200, True),
        "six_sixes": ((6, 6, 6, 6, 6, 6), 2400, True),
        "straight": ((1, 2, 3, 4, 5, 6), 1500, True),
        "three_pairs": ((2, 2, 4, 4, 6, 6), 1500, True),
        "two_triplets": ((1, 1, 1, 4, 4, 4), 2500, True),
        "four_and_pair": ((4, 4, 4, 4, 2, 2), 1500, True),
        "ones_and_fives": ((1, 1, 1, 5, 5), 1100, True),
        "twos_one_five": ((2, 2, 2, 1, 5), 350, True),
        "poisoned": ((1, 1, 2), 0, False),
        "single_two": ((2,), 0, False),
    }


@pytest.fixture
def bust_rolls() -> list[tuple[int, ...]]:
    """Rolls that should result in a bust."""
    return [
        (),
        (2,),
        (3, 4),
        (2, 3, 4, 6),
        (2, 3, 4, 6, 2, 3),
        (6, 6, 4, 4, 2),
    ]


# =============================================================================
# GAME STATE FIXTURES
# =============================================================================

def _make_player(player_id: str, name: str, **overrides) -> Player:
    return replace(create_player(player_id, name), **overrides)


@pytest.fixture
def make_player() -> Callable[..., Player]:
    """Factory for a player with field overrides (total_score, has_entered_game, ...)."""
    return _make_player


@pytest.fixture
def alice() -> Player:
    return _make_player("p1", "Alice")


@pytest.fixture
def bob() -> Player:
    return _make_player("p2", "Bob")


@pytest.fixture
def carol() -> Player:
    return _make_player("p3", "Carol")


@pytest.fixture
def lobby_game(alice: Player, bob: Player) -> Game:
    """Lobby with Alice and Bob seated, in that order."""
    game = create_new_game()
    return replace(game, players=(alice, bob), turn_order=("p1", "p2"))


@pytest.fixture
def build_game(alice: Player, bob: Player) -> Callable[..., Game]:
    """
    Factory for an in-progress game with a hand-built turn.

    ``dice`` is a sequence of (value, selectable) pairs. The selection is
    scored and the best selectable score computed the way the engine
    does, unless ``best`` is given.
    """

    def _build(
        dice: Sequence[tuple[int | None, bool]],
        *,
        selected: Sequence[int] = (),
        accumulated: int = 0,
        status: TurnStatus | None = None,
        best: int | None = None,
        players: Sequence[Player] | None = None,
        active_index: int = 0,
        final_round: FinalRound | None = None,
        minimum_entry_score: int = 500,
        target_score: int = 10000,
    ) -> Game:
        seated = tuple(players) if players is not None else (alice, bob)
        turn_order = tuple(p.player_id for p in seated)
        dice_tuple = tuple(Die(value=v, selectable=s) for v, s in dice)

        chosen = tuple(sorted(selected))
        score = FarkleScoring.score_selection([dice_tuple[i].value for i in chosen])
        selection = Selection(
            selected_indices=chosen,
            is_valid=score.is_valid,
            score=score.points,
        )
        if status is None:
            status = (
                TurnStatus.AWAITING_ROLL
                if chosen and score.is_valid
                else TurnStatus.AWAITING_SELECTION
            )
        if best is None:
            selectable = [d.value for d in dice_tuple if d.selectable and d.value is not None]
            best = FarkleScoring.best_scoring_subset(selectable).points

        return replace(
            create_new_game(),
            phase=GamePhase.IN_PROGRESS,
            config=GameConfig(
                minimum_entry_score=minimum_entry_score,
                target_score=target_score,
            ),
            players=seated,
            turn_order=turn_order,
            active_turn_index=active_index,
            turn=Turn(
                player_id=turn_order[active_index],
                dice=dice_tuple,
                accumulated_score=accumulated,
                selection=selection,
                status=status,
                best_selectable_score=best,
            ),
            final_round=final_round if final_round is not None else NoFinalRound(),
        )

    return _build
