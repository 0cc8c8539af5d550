"""
Farkle Party - State Factory and Queries

Builds fresh snapshots with correct defaults and answers read-only
questions about a snapshot. Nothing here changes a game.
"""

import secrets
from datetime import datetime, timezone

from src.engine.base import (
    NUM_DICE,
    Die,
    FinalRoundActive,
    Game,
    GameConfig,
    GamePhase,
    NoFinalRound,
    Player,
    Selection,
    Turn,
    TurnStatus,
)

DEFAULT_MINIMUM_ENTRY_SCORE = 500
DEFAULT_TARGET_SCORE = 10000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_new_game(
    minimum_entry_score: int = DEFAULT_MINIMUM_ENTRY_SCORE,
    target_score: int = DEFAULT_TARGET_SCORE,
) -> Game:
    """Create an empty game in the lobby phase."""
    return Game(
        game_id=secrets.token_hex(8),
        phase=GamePhase.LOBBY,
        config=GameConfig(
            minimum_entry_score=minimum_entry_score,
            target_score=target_score,
        ),
        players=(),
        turn_order=(),
        active_turn_index=0,
        turn=None,
        final_round=NoFinalRound(),
        created_at=utcnow(),
        finished_at=None,
    )


def create_player(player_id: str, name: str) -> Player:
    """Create a player with a freshly generated reconnection secret."""
    return Player(
        player_id=player_id,
        secret=secrets.token_hex(16),
        name=name,
        total_score=0,
        has_entered_game=False,
        connected=True,
        joined_at=utcnow(),
    )


def empty_selection() -> Selection:
    return Selection.empty()


def create_turn(player_id: str, dice_count: int = NUM_DICE) -> Turn:
    """
    Create a turn whose dice are not yet revealed.

    Raises:
        ValueError: If ``dice_count`` is zero (a caller bug)
    """
    return Turn(
        player_id=player_id,
        dice=tuple(Die(value=None, selectable=False) for _ in range(dice_count)),
        accumulated_score=0,
        selection=empty_selection(),
        status=TurnStatus.AWAITING_FIRST_ROLL,
        best_selectable_score=0,
    )


# -- Queries -------------------------------------------------------------

def find_player(game: Game | None, player_id: str) -> Player | None:
    if game is None:
        return None
    for player in game.players:
        if player.player_id == player_id:
            return player
    return None


def get_active_player_id(game: Game | None) -> str | None:
    """Id of the player whose turn it is, or None outside ``in_progress``."""
    if game is None or game.phase != GamePhase.IN_PROGRESS:
        return None
    if not game.turn_order:
        return None
    return game.turn_order[game.active_turn_index]


def get_active_player(game: Game | None) -> Player | None:
    player_id = get_active_player_id(game)
    if player_id is None:
        return None
    return find_player(game, player_id)


def is_active_player(game: Game | None, player_id: str) -> bool:
    """True if ``player_id`` owns the current turn."""
    if game is None or game.phase != GamePhase.IN_PROGRESS or game.turn is None:
        return False
    return game.turn.player_id == player_id


def bankable_score(turn: Turn | None) -> int:
    """Accumulated turn score plus the best selectable score."""
    if turn is None:
        return 0
    return turn.accumulated_score + turn.best_selectable_score


def can_player_bank(game: Game | None, player_id: str) -> bool:
    """Whether ``bank_turn_score`` would succeed for ``player_id`` right now."""
    if not is_active_player(game, player_id):
        return False

    player = find_player(game, player_id)
    if player is None:
        return False

    amount = bankable_score(game.turn)
    if amount <= 0:
        return False
    if not player.has_entered_game:
        return amount >= game.config.minimum_entry_score
    return True


def rankings(game: Game | None) -> list[Player]:
    """Players ordered by total score, highest first; ties keep roster order."""
    if game is None:
        return []
    return sorted(game.players, key=lambda p: p.total_score, reverse=True)


def validate_state_invariants(game: Game | None) -> None:
    """
    Check structural invariants of a snapshot.

    Raises:
        ValueError: On the first violated invariant
    """
    if game is None:
        return

    if len(game.turn_order) != len(game.players):
        raise ValueError(
            f"Invariant violation: turn_order length ({len(game.turn_order)}) "
            f"!= players length ({len(game.players)})"
        )

    player_ids = {p.player_id for p in game.players}
    if len(player_ids) != len(game.players):
        raise ValueError("Invariant violation: duplicate player ids in roster")

    for player_id in game.turn_order:
        if player_id not in player_ids:
            raise ValueError(
                f"Invariant violation: player {player_id} in turn_order not found in players"
            )

    if game.phase != GamePhase.IN_PROGRESS and game.turn is not None:
        raise ValueError(f"Invariant violation: turn is set but phase is {game.phase.value}")

    if game.phase == GamePhase.IN_PROGRESS:
        if game.turn is None:
            raise ValueError("Invariant violation: phase is in_progress but turn is None")
        if not 0 <= game.active_turn_index < len(game.turn_order):
            raise ValueError(
                f"Invariant violation: active_turn_index ({game.active_turn_index}) "
                f"out of bounds for turn_order length ({len(game.turn_order)})"
            )
        if game.turn.player_id != game.turn_order[game.active_turn_index]:
            raise ValueError("Invariant violation: turn owner is not the active player")

    if isinstance(game.final_round, FinalRoundActive):
        for player_id in game.final_round.pending_player_ids:
            if player_id not in player_ids:
                raise ValueError(
                    f"Invariant violation: pending final-round player {player_id} not found"
                )
