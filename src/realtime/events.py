"""
Farkle Party - Realtime Event Definitions

Event types and payloads for game state changes, and the classification
of a successful engine call into the events observers care about.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from src.engine.base import FinalRoundActive, Game, GamePhase, TurnOutcome


class GameEvent(Enum):
    """Events that can occur during a game."""

    PLAYER_JOINED = auto()
    PLAYER_LEFT = auto()
    PLAYER_RECONNECTED = auto()
    PLAYER_DISCONNECTED = auto()
    CONFIG_UPDATED = auto()
    GAME_STARTED = auto()
    DIE_TOGGLED = auto()
    DICE_ROLLED = auto()
    HOT_DICE = auto()
    PLAYER_BUST = auto()
    TURN_BANKED = auto()
    TURN_ADVANCED = auto()
    FINAL_ROUND_STARTED = auto()
    GAME_FINISHED = auto()
    GAME_RESET = auto()
    STATE_UPDATED = auto()


class Action(Enum):
    """Calls the session makes into the engine."""

    JOIN = "join"
    LEAVE = "leave"
    RECONNECT = "reconnect"
    DISCONNECT = "disconnect"
    CONFIGURE = "configure"
    START = "start"
    TOGGLE = "toggle"
    ROLL = "roll"
    BANK = "bank"
    FINISH = "finish"
    RESET = "reset"


@dataclass
class EventPayload:
    """Wrapper for realtime event data."""

    event: GameEvent
    game_id: str | None
    player_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


_ACTION_EVENT_MAP: dict[Action, GameEvent] = {
    Action.JOIN: GameEvent.PLAYER_JOINED,
    Action.LEAVE: GameEvent.PLAYER_LEFT,
    Action.RECONNECT: GameEvent.PLAYER_RECONNECTED,
    Action.DISCONNECT: GameEvent.PLAYER_DISCONNECTED,
    Action.CONFIGURE: GameEvent.CONFIG_UPDATED,
    Action.START: GameEvent.GAME_STARTED,
    Action.TOGGLE: GameEvent.DIE_TOGGLED,
    Action.ROLL: GameEvent.DICE_ROLLED,
    Action.BANK: GameEvent.TURN_BANKED,
    Action.RESET: GameEvent.GAME_RESET,
}

_OUTCOME_EVENT_MAP: dict[TurnOutcome, GameEvent] = {
    TurnOutcome.BUST: GameEvent.PLAYER_BUST,
    TurnOutcome.HOT_DICE: GameEvent.HOT_DICE,
}


def classify_transition(
    action: Action,
    before: Game | None,
    after: Game | None,
    outcome: TurnOutcome | None = None,
) -> list[GameEvent]:
    """
    Determine the events produced by a successful engine call.

    The primary event comes from the action (a bust replaces the plain
    roll event); secondary events are derived by diffing the snapshots.
    """
    events: list[GameEvent] = []

    if outcome in _OUTCOME_EVENT_MAP:
        events.append(_OUTCOME_EVENT_MAP[outcome])
    elif action in _ACTION_EVENT_MAP:
        events.append(_ACTION_EVENT_MAP[action])

    if before is None or after is None:
        return events or [GameEvent.STATE_UPDATED]

    if (
        not isinstance(before.final_round, FinalRoundActive)
        and isinstance(after.final_round, FinalRoundActive)
    ):
        events.append(GameEvent.FINAL_ROUND_STARTED)

    if before.phase != GamePhase.FINISHED and after.phase == GamePhase.FINISHED:
        events.append(GameEvent.GAME_FINISHED)
    elif after.phase == GamePhase.IN_PROGRESS and (
        action == Action.BANK or outcome == TurnOutcome.BUST
    ):
        events.append(GameEvent.TURN_ADVANCED)

    return events or [GameEvent.STATE_UPDATED]
