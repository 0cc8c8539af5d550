"""
Farkle Party - Game Session

Holds the single current game snapshot in process memory and serializes
every change to it. Each call authenticates the player, checks that they
may act now, runs one pure engine transition, stores the returned snapshot
and broadcasts it to subscribers.
"""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from src.config.settings import Settings, get_settings
from src.engine import turn_engine
from src.engine.base import ErrorCode, Game, GamePhase, TransitionResult
from src.engine.dice import DiceSource
from src.engine.state import create_new_game, create_player, find_player, is_active_player, utcnow
from src.realtime.events import Action, EventPayload, classify_transition
from src.realtime.snapshot import GameSnapshot

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 30
MAX_ID_ATTEMPTS = 25

Subscriber = Callable[[EventPayload], None]


@dataclass(frozen=True)
class Credentials:
    """Identity handed to a player when they join."""

    player_id: str
    player_secret: str = field(repr=False)


def _default_id() -> str:
    return secrets.token_hex(8)


class GameSession:
    """Owner of the one current game.

    All mutations run under a re-entrant lock, so callers on different
    threads never act on a stale snapshot. Subscribers are called while
    the lock is held, in the order the changes happened.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        rng: DiceSource | None = None,
        id_generator: Callable[[], str] | None = None,
        event_log_enabled: bool | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._rng = rng
        self._id_generator = id_generator or _default_id
        self._lock = threading.RLock()
        self._subscribers: list[Subscriber] = []
        self._event_log_enabled = (
            self._settings.event_log_enabled
            if event_log_enabled is None
            else event_log_enabled
        )
        self._event_log: list[dict[str, Any]] = []
        self._game: Game | None = self._new_game()

    # -- Read access -----------------------------------------------------

    @property
    def game(self) -> Game | None:
        """The current snapshot. Never mutated; replaced on every change."""
        return self._game

    def snapshot(self) -> GameSnapshot:
        """Public view of the current game, without player secrets."""
        return GameSnapshot.from_game(self._game)

    @property
    def event_log(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._event_log)

    # -- Subscribers -----------------------------------------------------

    def subscribe(self, on_event: Subscriber) -> None:
        with self._lock:
            if on_event not in self._subscribers:
                self._subscribers.append(on_event)

    def unsubscribe(self, on_event: Subscriber) -> None:
        with self._lock:
            if on_event in self._subscribers:
                self._subscribers.remove(on_event)

    # -- Lobby -----------------------------------------------------------

    def join(self, name: str) -> tuple[TransitionResult, Credentials | None]:
        """Seat a new player and hand back their credentials."""
        with self._lock:
            game = self._game
            trimmed = name.strip() if isinstance(name, str) else ""
            if not trimmed or len(trimmed) > MAX_NAME_LENGTH:
                return self._reject(Action.JOIN, ErrorCode.INVALID_NAME), None
            if game is None:
                return self._reject(Action.JOIN, ErrorCode.NO_GAME), None
            if any(p.name.lower() == trimmed.lower() for p in game.players):
                return self._reject(Action.JOIN, ErrorCode.DUPLICATE_NAME), None

            player = create_player(self._unique_player_id(game), trimmed)
            result = turn_engine.add_player(game, player)
            self._apply(Action.JOIN, result, player.player_id)
            if not result.success:
                return result, None
            return result, Credentials(player.player_id, player.secret)

    def leave(self, player_id: str, player_secret: str) -> TransitionResult:
        """Give up a seat while the game is still in the lobby."""
        with self._lock:
            error = self._authenticate(player_id, player_secret)
            if error is not None:
                return self._reject(Action.LEAVE, error, player_id)
            result = turn_engine.remove_player(self._game, player_id)
            return self._apply(Action.LEAVE, result, player_id)

    def configure(
        self,
        *,
        minimum_entry_score: int | None = None,
        target_score: int | None = None,
    ) -> TransitionResult:
        with self._lock:
            result = turn_engine.update_game_config(
                self._game,
                minimum_entry_score=minimum_entry_score,
                target_score=target_score,
            )
            return self._apply(Action.CONFIGURE, result)

    # -- Connection bookkeeping -----------------------------------------

    def reconnect(self, player_id: str, player_secret: str) -> TransitionResult:
        """Re-attach a returning player using their secret."""
        with self._lock:
            error = self._authenticate(player_id, player_secret)
            if error is not None:
                return self._reject(Action.RECONNECT, error, player_id)
            result = turn_engine.update_player_connection(self._game, player_id, True)
            return self._apply(Action.RECONNECT, result, player_id)

    def disconnect(self, player_id: str) -> TransitionResult:
        """Mark a player offline. Already-offline players are left as is."""
        with self._lock:
            player = find_player(self._game, player_id)
            if player is not None and not player.connected:
                return TransitionResult.ok(self._game)
            result = turn_engine.update_player_connection(self._game, player_id, False)
            return self._apply(Action.DISCONNECT, result, player_id)

    # -- Game flow -------------------------------------------------------

    def start(self) -> TransitionResult:
        with self._lock:
            result = turn_engine.start_game(self._game, rng=self._rng)
            return self._apply(Action.START, result)

    def toggle_die(self, player_id: str, player_secret: str, die_index: int) -> TransitionResult:
        with self._lock:
            error = self._guard_turn(player_id, player_secret)
            if error is not None:
                return self._reject(Action.TOGGLE, error, player_id)
            result = turn_engine.toggle_die_selection(
                self._game, die_index, player_id=player_id
            )
            return self._apply(Action.TOGGLE, result, player_id)

    def roll(self, player_id: str, player_secret: str) -> TransitionResult:
        with self._lock:
            error = self._guard_turn(player_id, player_secret)
            if error is not None:
                return self._reject(Action.ROLL, error, player_id)
            result = turn_engine.roll_turn_dice(
                self._game, player_id=player_id, rng=self._rng
            )
            return self._apply(Action.ROLL, result, player_id)

    def bank(self, player_id: str, player_secret: str) -> TransitionResult:
        with self._lock:
            error = self._guard_turn(player_id, player_secret)
            if error is not None:
                return self._reject(Action.BANK, error, player_id)
            result = turn_engine.bank_turn_score(self._game, player_id=player_id)
            return self._apply(Action.BANK, result, player_id)

    def finish(self) -> TransitionResult:
        with self._lock:
            result = turn_engine.finish_game(self._game)
            return self._apply(Action.FINISH, result)

    def reset(
        self,
        *,
        minimum_entry_score: int | None = None,
        target_score: int | None = None,
    ) -> TransitionResult:
        """Replace the game with a fresh lobby. All player identities are dropped."""
        with self._lock:
            before = self._game
            self._game = self._new_game(minimum_entry_score, target_score)
            self._event_log.clear()
            logger.info("Game reset, new game %s", self._game.game_id)
            self._publish(Action.RESET, before, self._game, None, None)
            return TransitionResult.ok(self._game)

    def clear(self) -> None:
        """Drop the game entirely (idle, no game to join)."""
        with self._lock:
            self._game = None
            self._event_log.clear()
            logger.info("Game cleared")

    # -- Internals -------------------------------------------------------

    def _new_game(
        self,
        minimum_entry_score: int | None = None,
        target_score: int | None = None,
    ) -> Game:
        return create_new_game(
            minimum_entry_score=(
                self._settings.minimum_entry_score
                if minimum_entry_score is None
                else minimum_entry_score
            ),
            target_score=(
                self._settings.target_score if target_score is None else target_score
            ),
        )

    def _unique_player_id(self, game: Game) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_generator()
            if find_player(game, candidate) is None:
                return candidate
        raise RuntimeError("Unable to generate a unique player id.")

    def _authenticate(self, player_id: str, player_secret: str) -> ErrorCode | None:
        if not player_id or not player_secret:
            return ErrorCode.INVALID_CREDENTIALS
        if self._game is None:
            return ErrorCode.NO_GAME
        player = find_player(self._game, player_id)
        if player is None:
            return ErrorCode.UNKNOWN_PLAYER
        if not secrets.compare_digest(player.secret, player_secret):
            return ErrorCode.INVALID_SECRET
        return None

    def _guard_turn(self, player_id: str, player_secret: str) -> ErrorCode | None:
        error = self._authenticate(player_id, player_secret)
        if error is not None:
            return error
        if self._game.phase != GamePhase.IN_PROGRESS:
            return ErrorCode.INVALID_PHASE
        if not is_active_player(self._game, player_id):
            return ErrorCode.NOT_YOUR_TURN
        return None

    def _reject(
        self,
        action: Action,
        error: ErrorCode,
        player_id: str | None = None,
    ) -> TransitionResult:
        logger.warning(
            "Rejected %s from player %s: %s", action.value, player_id, error.value
        )
        return TransitionResult.fail(error)

    def _apply(
        self,
        action: Action,
        result: TransitionResult,
        player_id: str | None = None,
    ) -> TransitionResult:
        """Store a successful result and broadcast; log a rejected one."""
        if not result.success:
            return self._reject(action, result.error, player_id)

        before = self._game
        self._game = result.game
        outcome = result.outcome.value if result.outcome is not None else "continue"
        logger.info("Applied %s for player %s (%s)", action.value, player_id, outcome)
        self._publish(action, before, result.game, result, player_id)
        return result

    def _publish(
        self,
        action: Action,
        before: Game | None,
        after: Game | None,
        result: TransitionResult | None,
        player_id: str | None,
    ) -> None:
        outcome = result.outcome if result is not None else None
        events = classify_transition(action, before, after, outcome)
        snapshot = GameSnapshot.from_game(after).to_wire()
        game_id = after.game_id if after is not None else None

        for event in events:
            if self._event_log_enabled:
                self._event_log.append({
                    "timestamp": utcnow().isoformat(),
                    "type": event.name.lower(),
                    "player_id": player_id,
                    "outcome": outcome.value if outcome is not None else None,
                })
            payload = EventPayload(
                event=event,
                game_id=game_id,
                player_id=player_id,
                data={"game_state": snapshot},
            )
            for subscriber in list(self._subscribers):
                try:
                    subscriber(payload)
                except Exception:
                    logger.exception("Subscriber failed handling %s", event.name)


# -- Module-level convenience functions ----------------------------------

_session_instance: GameSession | None = None
_session_lock = threading.Lock()


def get_session() -> GameSession:
    """Get or create the process-wide GameSession."""
    global _session_instance
    with _session_lock:
        if _session_instance is None:
            _session_instance = GameSession()
        return _session_instance
