"""
Farkle Party - Public Snapshot Models

Pydantic models that mirror a ``Game`` snapshot as observers see it.
Player secrets are never part of these models.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.engine.base import FinalRoundActive, Game, GamePhase, Player, Turn
from src.engine.state import rankings


class _View(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ConfigView(_View):
    minimum_entry_score: int
    target_score: int


class PlayerView(_View):
    """Public part of a player (no secret)."""

    player_id: str
    name: str
    total_score: int = 0
    has_entered_game: bool = False
    connected: bool = True
    joined_at: datetime | None = None

    @classmethod
    def from_player(cls, player: Player) -> "PlayerView":
        return cls(
            player_id=player.player_id,
            name=player.name,
            total_score=player.total_score,
            has_entered_game=player.has_entered_game,
            connected=player.connected,
            joined_at=player.joined_at,
        )


class DieView(_View):
    value: int | None = None
    selectable: bool = False


class SelectionView(_View):
    selected_indices: list[int] = Field(default_factory=list)
    is_valid: bool = True
    selection_score: int = 0


class TurnView(_View):
    player_id: str
    dice: list[DieView]
    accumulated_turn_score: int = 0
    selection: SelectionView
    status: str
    best_selectable_score: int = 0

    @classmethod
    def from_turn(cls, turn: Turn) -> "TurnView":
        return cls(
            player_id=turn.player_id,
            dice=[DieView(value=d.value, selectable=d.selectable) for d in turn.dice],
            accumulated_turn_score=turn.accumulated_score,
            selection=SelectionView(
                selected_indices=list(turn.selection.selected_indices),
                is_valid=turn.selection.is_valid,
                selection_score=turn.selection.score,
            ),
            status=turn.status.value,
            best_selectable_score=turn.best_selectable_score,
        )


class FinalRoundView(_View):
    active: bool = False
    triggering_player_id: str | None = None
    remaining_player_ids: list[str] = Field(default_factory=list)


class RankingEntry(_View):
    rank: int
    player_id: str
    name: str
    total_score: int


class GameSnapshot(_View):
    """Full public snapshot broadcast after every successful change."""

    game_id: str | None = None
    phase: str = "lobby"
    config: ConfigView | None = None
    players: list[PlayerView] = Field(default_factory=list)
    turn_order: list[str] = Field(default_factory=list)
    active_turn_index: int = 0
    turn: TurnView | None = None
    final_round: FinalRoundView = Field(default_factory=FinalRoundView)
    rankings: list[RankingEntry] | None = None
    created_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_game(cls, game: Game | None) -> "GameSnapshot":
        """Build the public view of ``game``; an empty lobby view for None."""
        if game is None:
            return cls()

        final_round = FinalRoundView()
        if isinstance(game.final_round, FinalRoundActive):
            final_round = FinalRoundView(
                active=True,
                triggering_player_id=game.final_round.triggering_player_id,
                remaining_player_ids=list(game.final_round.pending_player_ids),
            )

        ranking = None
        if game.phase == GamePhase.FINISHED:
            ranking = [
                RankingEntry(
                    rank=position,
                    player_id=player.player_id,
                    name=player.name,
                    total_score=player.total_score,
                )
                for position, player in enumerate(rankings(game), start=1)
            ]

        return cls(
            game_id=game.game_id,
            phase=game.phase.value,
            config=ConfigView(
                minimum_entry_score=game.config.minimum_entry_score,
                target_score=game.config.target_score,
            ),
            players=[PlayerView.from_player(p) for p in game.players],
            turn_order=list(game.turn_order),
            active_turn_index=game.active_turn_index,
            turn=TurnView.from_turn(game.turn) if game.turn is not None else None,
            final_round=final_round,
            rankings=ranking,
            created_at=game.created_at,
            finished_at=game.finished_at,
        )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
