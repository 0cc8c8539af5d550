"""
Farkle Party - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. All classes are immutable (frozen dataclasses) so that every
transition produces a brand-new snapshot and observers holding an older one
are never affected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Union

NUM_DICE = 6
DIE_FACES = 6


class GamePhase(Enum):
    """Lifecycle phase of the single game."""
    LOBBY = "lobby"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class TurnStatus(Enum):
    """States of a turn. No other states exist."""
    AWAITING_FIRST_ROLL = "awaiting_first_roll"
    AWAITING_SELECTION = "awaiting_selection"
    AWAITING_ROLL = "awaiting_roll"


class TurnOutcome(Enum):
    """Special outcome attached to a successful transition."""
    BUST = "bust"
    HOT_DICE = "hot_dice"
    GAME_FINISHED = "game_finished"


class ErrorCode(Enum):
    """Stable failure codes returned by engine and session calls."""
    NO_GAME = "NO_GAME"
    INVALID_PHASE = "INVALID_PHASE"
    NO_PLAYERS = "NO_PLAYERS"
    INVALID_PLAYER = "INVALID_PLAYER"
    DUPLICATE_PLAYER = "DUPLICATE_PLAYER"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    INVALID_CONFIG = "INVALID_CONFIG"
    NO_ACTIVE_TURN = "NO_ACTIVE_TURN"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    INVALID_DIE_INDEX = "INVALID_DIE_INDEX"
    DIE_NOT_SELECTABLE = "DIE_NOT_SELECTABLE"
    INVALID_SELECTION = "INVALID_SELECTION"
    ZERO_SCORE = "ZERO_SCORE"
    MINIMUM_ENTRY_NOT_MET = "MINIMUM_ENTRY_NOT_MET"
    GAME_ALREADY_FINISHED = "GAME_ALREADY_FINISHED"
    # Session layer
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    INVALID_SECRET = "INVALID_SECRET"
    INVALID_NAME = "INVALID_NAME"
    DUPLICATE_NAME = "DUPLICATE_NAME"


class ScoringCategory(Enum):
    """Categories of scoring combinations."""
    SINGLE_ONE = auto()
    SINGLE_FIVE = auto()
    THREE_OF_A_KIND = auto()
    FOUR_OF_A_KIND = auto()
    FIVE_OF_A_KIND = auto()
    SIX_OF_A_KIND = auto()
    STRAIGHT = auto()          # 1-2-3-4-5-6
    THREE_PAIRS = auto()
    TWO_TRIPLETS = auto()


@dataclass(frozen=True)
class ScoringBreakdown:
    """
    A single scoring component within a selection.

    Attributes:
        category: The type of scoring combination
        dice_values: The dice that contributed to this score
        points: Points awarded for this combination
        description: Human-readable description
    """
    category: ScoringCategory
    dice_values: tuple[int, ...]
    points: int
    description: str


@dataclass(frozen=True)
class SelectionScore:
    """
    Result of scoring a tentative selection.

    Attributes:
        points: Total points (always 0 when invalid)
        is_valid: Whether every die in the selection was consumed by a combination
        breakdown: Scoring components, empty when invalid
    """
    points: int
    is_valid: bool
    breakdown: tuple[ScoringBreakdown, ...] = ()

    def __str__(self) -> str:
        if not self.is_valid:
            return "Invalid selection."
        lines = [f"Total: {self.points} points"]
        for item in self.breakdown:
            lines.append(f"  - {item.description}: {item.points}")
        return "\n".join(lines)


@dataclass(frozen=True)
class BestSubset:
    """Greedy best-effort scoring subset of a roll."""
    points: int
    chosen_values: tuple[int, ...]


@dataclass(frozen=True)
class GameConfig:
    """
    Configuration for a game.

    Attributes:
        minimum_entry_score: Amount a first bank must reach
        target_score: Total that triggers the final round
    """
    minimum_entry_score: int = 500
    target_score: int = 10000

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.minimum_entry_score < 0:
            raise ValueError("Minimum entry score cannot be negative.")
        if self.target_score <= 0:
            raise ValueError("Target score must be positive.")


@dataclass(frozen=True)
class Player:
    """
    A seated player.

    Attributes:
        player_id: Unique identifier
        secret: Reconnection token, never shown to other clients
        name: Display name
        total_score: Cumulative banked score
        has_entered_game: True once a bank has met the minimum entry score
        connected: Connectivity flag maintained by the calling layer
        joined_at: Join timestamp (UTC)
    """
    player_id: str
    secret: str = field(repr=False)
    name: str
    total_score: int = 0
    has_entered_game: bool = False
    connected: bool = True
    joined_at: datetime | None = None


@dataclass(frozen=True)
class Die:
    """A single die. ``value`` is None until the turn's first roll."""
    value: int | None = None
    selectable: bool = False

    def __post_init__(self) -> None:
        if self.value is not None and not (1 <= self.value <= DIE_FACES):
            raise ValueError(
                f"Invalid die value {self.value}. Must be between 1 and {DIE_FACES}."
            )

    @property
    def is_revealed(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class Selection:
    """
    The player's current tentative selection.

    An empty selection is valid with score 0, but it can never be rolled
    or banked on its own.
    """
    selected_indices: tuple[int, ...] = ()
    is_valid: bool = True
    score: int = 0

    @classmethod
    def empty(cls) -> "Selection":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.selected_indices


@dataclass(frozen=True)
class Turn:
    """
    Complete state of the active player's turn.

    Attributes:
        player_id: Owner of the turn
        dice: One to six dice
        accumulated_score: Points locked in by earlier rolls this turn
        selection: Current selection
        status: Turn state machine status
        best_selectable_score: Best-subset score of the selectable dice,
            the amount banking adds on top of ``accumulated_score``
    """
    player_id: str
    dice: tuple[Die, ...]
    accumulated_score: int = 0
    selection: Selection = field(default_factory=Selection)
    status: TurnStatus = TurnStatus.AWAITING_FIRST_ROLL
    best_selectable_score: int = 0

    def __post_init__(self) -> None:
        if not self.dice:
            raise ValueError("Cannot create a turn with no dice.")
        if len(self.dice) > NUM_DICE:
            raise ValueError(f"A turn holds at most {NUM_DICE} dice, got {len(self.dice)}.")

    @property
    def selectable_indices(self) -> tuple[int, ...]:
        return tuple(i for i, die in enumerate(self.dice) if die.selectable)

    @property
    def selectable_values(self) -> tuple[int, ...]:
        return tuple(
            die.value for die in self.dice
            if die.selectable and die.value is not None
        )


@dataclass(frozen=True)
class NoFinalRound:
    """No player has reached the target score yet."""

    @property
    def is_active(self) -> bool:
        return False


@dataclass(frozen=True)
class FinalRoundActive:
    """
    A player reached the target score; everyone else is owed one turn.

    Attributes:
        triggering_player_id: Player whose bank started the final round
        pending_player_ids: Players who still owe their final turn
    """
    triggering_player_id: str
    pending_player_ids: tuple[str, ...]

    @property
    def is_active(self) -> bool:
        return True

    def without(self, player_id: str) -> "FinalRoundActive":
        """Copy with ``player_id`` removed from the pending set."""
        return FinalRoundActive(
            triggering_player_id=self.triggering_player_id,
            pending_player_ids=tuple(
                pid for pid in self.pending_player_ids if pid != player_id
            ),
        )


FinalRound = Union[NoFinalRound, FinalRoundActive]


@dataclass(frozen=True)
class Game:
    """
    Immutable snapshot of the whole game.

    Attributes:
        game_id: Unique identifier
        phase: Lobby, in progress or finished
        config: Entry and target scores
        players: Ordered roster
        turn_order: Permutation of player ids, same length as ``players``
        active_turn_index: Index into ``turn_order`` of the active player
        turn: Current turn, None outside ``in_progress``
        final_round: End-game tracking
        created_at: Creation timestamp (UTC)
        finished_at: Completion timestamp (UTC)
    """
    game_id: str
    phase: GamePhase = GamePhase.LOBBY
    config: GameConfig = field(default_factory=GameConfig)
    players: tuple[Player, ...] = ()
    turn_order: tuple[str, ...] = ()
    active_turn_index: int = 0
    turn: Turn | None = None
    final_round: FinalRound = field(default_factory=NoFinalRound)
    created_at: datetime | None = None
    finished_at: datetime | None = None


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a transition: a new snapshot or a failure code.

    Attributes:
        success: Whether the transition was applied
        game: The new snapshot on success
        error: Failure code on rejection
        outcome: Optional tag (bust, hot dice, game finished)
    """
    success: bool
    game: Game | None = None
    error: ErrorCode | None = None
    outcome: TurnOutcome | None = None

    @classmethod
    def ok(cls, game: Game, outcome: TurnOutcome | None = None) -> "TransitionResult":
        return cls(success=True, game=game, outcome=outcome)

    @classmethod
    def fail(cls, error: ErrorCode) -> "TransitionResult":
        return cls(success=False, error=error)
