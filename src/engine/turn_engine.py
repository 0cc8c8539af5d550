"""
Farkle Party - Turn Engine

Pure state transitions for the game. Every function takes an immutable
``Game`` snapshot and returns a ``TransitionResult`` holding either a brand
new snapshot or an ``ErrorCode``. Rule violations never raise and never
leave a partially updated snapshot behind.

Turn lifecycle:
    awaiting_first_roll -> awaiting_selection <-> awaiting_roll

After every roll the best-scoring subset of the selectable dice is
auto-selected, and its score is cached as the turn's banking ceiling.
"""

from dataclasses import replace
from typing import Iterable

from src.engine.base import (
    NUM_DICE,
    Die,
    ErrorCode,
    FinalRoundActive,
    Game,
    GameConfig,
    GamePhase,
    NoFinalRound,
    Player,
    Selection,
    TransitionResult,
    Turn,
    TurnOutcome,
    TurnStatus,
)
from src.engine.dice import DiceSource, default_source, roll_faces
from src.engine.scoring import FarkleScoring
from src.engine.state import bankable_score, create_turn, find_player, utcnow


# -- Lobby -----------------------------------------------------------------

def add_player(game: Game | None, player: Player | None) -> TransitionResult:
    """Seat a player during the lobby phase."""
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    if game.phase != GamePhase.LOBBY:
        return TransitionResult.fail(ErrorCode.INVALID_PHASE)
    if player is None or not player.player_id:
        return TransitionResult.fail(ErrorCode.INVALID_PLAYER)
    if find_player(game, player.player_id) is not None:
        return TransitionResult.fail(ErrorCode.DUPLICATE_PLAYER)

    return TransitionResult.ok(replace(
        game,
        players=game.players + (player,),
        turn_order=game.turn_order + (player.player_id,),
    ))


def remove_player(game: Game | None, player_id: str) -> TransitionResult:
    """Remove a player during the lobby phase."""
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    if game.phase != GamePhase.LOBBY:
        return TransitionResult.fail(ErrorCode.INVALID_PHASE)
    if find_player(game, player_id) is None:
        return TransitionResult.fail(ErrorCode.PLAYER_NOT_FOUND)

    return TransitionResult.ok(replace(
        game,
        players=tuple(p for p in game.players if p.player_id != player_id),
        turn_order=tuple(pid for pid in game.turn_order if pid != player_id),
    ))


def update_game_config(
    game: Game | None,
    *,
    minimum_entry_score: int | None = None,
    target_score: int | None = None,
) -> TransitionResult:
    """Change entry or target score while still in the lobby."""
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    if game.phase != GamePhase.LOBBY:
        return TransitionResult.fail(ErrorCode.INVALID_PHASE)

    changes: dict[str, int] = {}
    if minimum_entry_score is not None:
        changes["minimum_entry_score"] = minimum_entry_score
    if target_score is not None:
        changes["target_score"] = target_score

    try:
        config = GameConfig(**{
            "minimum_entry_score": game.config.minimum_entry_score,
            "target_score": game.config.target_score,
            **changes,
        })
    except (TypeError, ValueError):
        return TransitionResult.fail(ErrorCode.INVALID_CONFIG)

    return TransitionResult.ok(replace(game, config=config))


def update_player_connection(
    game: Game | None,
    player_id: str,
    connected: bool,
) -> TransitionResult:
    """Flip a player's connectivity flag. Allowed in any phase."""
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    player = find_player(game, player_id)
    if player is None:
        return TransitionResult.fail(ErrorCode.PLAYER_NOT_FOUND)

    return TransitionResult.ok(
        _replace_player(game, replace(player, connected=connected))
    )


# -- Game flow -------------------------------------------------------------

def start_game(game: Game | None, *, rng: DiceSource | None = None) -> TransitionResult:
    """
    Move from lobby to in_progress.

    The turn order is shuffled once here; the first player in the shuffled
    order gets a fresh turn with unrevealed dice.
    """
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    if game.phase != GamePhase.LOBBY:
        return TransitionResult.fail(ErrorCode.INVALID_PHASE)
    if not game.players:
        return TransitionResult.fail(ErrorCode.NO_PLAYERS)

    source = rng if rng is not None else default_source
    started = replace(
        game,
        phase=GamePhase.IN_PROGRESS,
        turn_order=tuple(source.shuffle(game.turn_order)),
        final_round=NoFinalRound(),
        finished_at=None,
    )
    return TransitionResult.ok(_start_turn(started, 0))


def advance_to_next_turn(game: Game | None) -> TransitionResult:
    """Hand the dice to the next player in turn order."""
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    if game.phase != GamePhase.IN_PROGRESS:
        return TransitionResult.fail(ErrorCode.INVALID_PHASE)
    if not game.turn_order:
        return TransitionResult.fail(ErrorCode.NO_PLAYERS)

    return TransitionResult.ok(_advance(game))


def finish_game(game: Game | None) -> TransitionResult:
    """End the game. Rejected if it is already finished."""
    if game is None:
        return TransitionResult.fail(ErrorCode.NO_GAME)
    if game.phase == GamePhase.FINISHED:
        return TransitionResult.fail(ErrorCode.GAME_ALREADY_FINISHED)

    return TransitionResult.ok(_finish(game), TurnOutcome.GAME_FINISHED)


# -- Turn actions ----------------------------------------------------------

def toggle_die_selection(
    game: Game | None,
    die_index: int,
    *,
    player_id: str | None = None,
) -> TransitionResult:
    """Add or remove one selectable die from the current selection."""
    error = _check_turn(game, player_id)
    if error is not None:
        return TransitionResult.fail(error)

    turn = game.turn
    if isinstance(die_index, bool) or not isinstance(die_index, int):
        return TransitionResult.fail(ErrorCode.INVALID_DIE_INDEX)
    if not 0 <= die_index < len(turn.dice):
        return TransitionResult.fail(ErrorCode.INVALID_DIE_INDEX)
    if not turn.dice[die_index].selectable:
        return TransitionResult.fail(ErrorCode.DIE_NOT_SELECTABLE)

    selected = set(turn.selection.selected_indices) ^ {die_index}
    selection = _evaluate_selection(turn.dice, selected)

    return TransitionResult.ok(replace(game, turn=replace(
        turn,
        selection=selection,
        status=_status_for(selection),
    )))


def roll_turn_dice(
    game: Game | None,
    *,
    player_id: str | None = None,
    rng: DiceSource | None = None,
) -> TransitionResult:
    """
    Roll for the active turn.

    On the first roll all six dice are revealed. Afterwards the selected
    dice are scored into the accumulated total and locked, and the rest
    are re-rolled; selecting every remaining die earns six fresh dice
    (hot dice). A fresh roll with nothing to score busts the turn.

    Returns:
        TransitionResult with outcome BUST, HOT_DICE or None
    """
    error = _check_turn(game, player_id)
    if error is not None:
        return TransitionResult.fail(error)

    turn = game.turn

    if turn.status == TurnStatus.AWAITING_FIRST_ROLL:
        faces = roll_faces(NUM_DICE, rng)
        if FarkleScoring.is_bust(faces):
            return _bust(game)
        rolled = replace(
            turn,
            dice=tuple(Die(value=face, selectable=True) for face in faces),
            accumulated_score=0,
        )
        return TransitionResult.ok(replace(game, turn=_auto_select(rolled)))

    selection = turn.selection
    if (
        turn.status != TurnStatus.AWAITING_ROLL
        or selection.is_empty
        or not selection.is_valid
    ):
        return TransitionResult.fail(ErrorCode.INVALID_SELECTION)

    selected = set(selection.selected_indices)
    accumulated = turn.accumulated_score + selection.score

    if selected == set(turn.selectable_indices):
        faces = roll_faces(NUM_DICE, rng)
        if FarkleScoring.is_bust(faces):
            return _bust(game)
        fresh = replace(
            turn,
            dice=tuple(Die(value=face, selectable=True) for face in faces),
            accumulated_score=accumulated,
            selection=Selection.empty(),
        )
        return TransitionResult.ok(
            replace(game, turn=_auto_select(fresh)),
            TurnOutcome.HOT_DICE,
        )

    reroll = [
        i for i, die in enumerate(turn.dice)
        if die.selectable and i not in selected
    ]
    faces = roll_faces(len(reroll), rng)
    if FarkleScoring.is_bust(faces):
        return _bust(game)

    new_faces = dict(zip(reroll, faces))
    dice = []
    for i, die in enumerate(turn.dice):
        if i in selected:
            dice.append(Die(value=die.value, selectable=False))
        elif i in new_faces:
            dice.append(Die(value=new_faces[i], selectable=True))
        else:
            dice.append(die)

    rolled = replace(
        turn,
        dice=tuple(dice),
        accumulated_score=accumulated,
        selection=Selection.empty(),
    )
    return TransitionResult.ok(replace(game, turn=_auto_select(rolled)))


def bank_turn_score(game: Game | None, *, player_id: str | None = None) -> TransitionResult:
    """
    Bank the turn into the owner's total and pass the dice on.

    The banked amount is the accumulated score plus the best selectable
    score, independent of what the player currently has selected.

    Returns:
        TransitionResult with outcome GAME_FINISHED when this bank ends the game
    """
    error = _check_turn(game, player_id)
    if error is not None:
        return TransitionResult.fail(error)

    turn = game.turn
    player = find_player(game, turn.player_id)
    if player is None:
        return TransitionResult.fail(ErrorCode.PLAYER_NOT_FOUND)

    amount = bankable_score(turn)
    if amount <= 0:
        return TransitionResult.fail(ErrorCode.ZERO_SCORE)
    if not player.has_entered_game and amount < game.config.minimum_entry_score:
        return TransitionResult.fail(ErrorCode.MINIMUM_ENTRY_NOT_MET)

    banker = replace(
        player,
        total_score=player.total_score + amount,
        has_entered_game=True,
    )
    banked = replace(_replace_player(game, banker), turn=None)

    if (
        isinstance(banked.final_round, NoFinalRound)
        and banker.total_score >= game.config.target_score
    ):
        others = tuple(pid for pid in banked.turn_order if pid != banker.player_id)
        if not others:
            return TransitionResult.ok(_finish(banked), TurnOutcome.GAME_FINISHED)
        final_round = FinalRoundActive(
            triggering_player_id=banker.player_id,
            pending_player_ids=others,
        )
        return TransitionResult.ok(_advance(replace(banked, final_round=final_round)))

    ended, finished = _end_turn(banked, banker.player_id)
    return TransitionResult.ok(ended, TurnOutcome.GAME_FINISHED if finished else None)


# -- Internals -------------------------------------------------------------

def _check_turn(game: Game | None, player_id: str | None) -> ErrorCode | None:
    if game is None:
        return ErrorCode.NO_GAME
    if game.phase != GamePhase.IN_PROGRESS:
        return ErrorCode.INVALID_PHASE
    if game.turn is None:
        return ErrorCode.NO_ACTIVE_TURN
    if player_id is not None and game.turn.player_id != player_id:
        return ErrorCode.NOT_YOUR_TURN
    return None


def _replace_player(game: Game, player: Player) -> Game:
    return replace(game, players=tuple(
        player if p.player_id == player.player_id else p
        for p in game.players
    ))


def _evaluate_selection(dice: tuple[Die, ...], indices: Iterable[int]) -> Selection:
    ordered = tuple(sorted(indices))
    result = FarkleScoring.score_selection([dice[i].value for i in ordered])
    return Selection(
        selected_indices=ordered,
        is_valid=result.is_valid,
        score=result.points,
    )


def _status_for(selection: Selection) -> TurnStatus:
    if selection.is_valid and not selection.is_empty:
        return TurnStatus.AWAITING_ROLL
    return TurnStatus.AWAITING_SELECTION


def _indices_for_values(turn: Turn, values: tuple[int, ...]) -> list[int]:
    """Find one selectable index for each wanted face value."""
    needed = list(values)
    indices: list[int] = []
    for i in turn.selectable_indices:
        value = turn.dice[i].value
        if value in needed:
            needed.remove(value)
            indices.append(i)
    return indices


def _auto_select(turn: Turn) -> Turn:
    """Select the best-scoring subset and cache its score."""
    best = FarkleScoring.best_scoring_subset(turn.selectable_values)
    indices = _indices_for_values(turn, best.chosen_values)

    if best.points > 0 and indices:
        selection = _evaluate_selection(turn.dice, indices)
    else:
        selection = Selection.empty()

    return replace(
        turn,
        selection=selection,
        status=_status_for(selection),
        best_selectable_score=best.points,
    )


def _start_turn(game: Game, index: int) -> Game:
    return replace(
        game,
        active_turn_index=index,
        turn=create_turn(game.turn_order[index]),
    )


def _advance(game: Game) -> Game:
    """Start the next turn, skipping players no longer owed a final turn."""
    count = len(game.turn_order)
    next_index = (game.active_turn_index + 1) % count

    final_round = game.final_round
    if isinstance(final_round, FinalRoundActive) and final_round.pending_player_ids:
        for step in range(count):
            candidate = (game.active_turn_index + 1 + step) % count
            if game.turn_order[candidate] in final_round.pending_player_ids:
                next_index = candidate
                break

    return _start_turn(game, next_index)


def _finish(game: Game) -> Game:
    return replace(
        game,
        phase=GamePhase.FINISHED,
        turn=None,
        finished_at=utcnow(),
    )


def _end_turn(game: Game, player_id: str) -> tuple[Game, bool]:
    """
    Close ``player_id``'s turn and move on.

    Returns:
        Tuple of (new_game, finished)
    """
    final_round = game.final_round
    if isinstance(final_round, FinalRoundActive):
        final_round = final_round.without(player_id)
        game = replace(game, final_round=final_round)
        if not final_round.pending_player_ids:
            return _finish(game), True
    return _advance(game), False


def _bust(game: Game) -> TransitionResult:
    """Forfeit the turn's accumulated score and pass the dice on."""
    ended, _ = _end_turn(replace(game, turn=None), game.turn.player_id)
    return TransitionResult.ok(ended, TurnOutcome.BUST)
