"""
Farkle Party Game Engine.

Pure Python game logic with zero UI/transport dependencies.
Handles scoring, dice rolling, bust detection, hot dice, banking and the
final round.
"""

from src.engine.base import (
    BestSubset,
    Die,
    ErrorCode,
    FinalRoundActive,
    Game,
    GameConfig,
    GamePhase,
    NoFinalRound,
    Player,
    ScoringBreakdown,
    ScoringCategory,
    Selection,
    SelectionScore,
    TransitionResult,
    Turn,
    TurnOutcome,
    TurnStatus,
)
from src.engine.dice import DiceSource, ScriptedDice, SecureDice
from src.engine.scoring import FarkleScoring
from src.engine.state import (
    bankable_score,
    can_player_bank,
    create_new_game,
    create_player,
    create_turn,
    find_player,
    get_active_player,
    get_active_player_id,
    is_active_player,
    rankings,
    validate_state_invariants,
)
from src.engine.turn_engine import (
    add_player,
    advance_to_next_turn,
    bank_turn_score,
    finish_game,
    remove_player,
    roll_turn_dice,
    start_game,
    toggle_die_selection,
    update_game_config,
    update_player_connection,
)

__all__ = [
    # Data Classes
    "BestSubset",
    "Die",
    "FinalRoundActive",
    "Game",
    "GameConfig",
    "NoFinalRound",
    "Player",
    "ScoringBreakdown",
    "Selection",
    "SelectionScore",
    "TransitionResult",
    "Turn",
    # Enums
    "ErrorCode",
    "GamePhase",
    "ScoringCategory",
    "TurnOutcome",
    "TurnStatus",
    # Randomness
    "DiceSource",
    "ScriptedDice",
    "SecureDice",
    # Scoring
    "FarkleScoring",
    # State factory and queries
    "bankable_score",
    "can_player_bank",
    "create_new_game",
    "create_player",
    "create_turn",
    "find_player",
    "get_active_player",
    "get_active_player_id",
    "is_active_player",
    "rankings",
    "validate_state_invariants",
    # Transitions
    "add_player",
    "advance_to_next_turn",
    "bank_turn_score",
    "finish_game",
    "remove_player",
    "roll_turn_dice",
    "start_game",
    "toggle_die_selection",
    "update_game_config",
    "update_player_connection",
]
