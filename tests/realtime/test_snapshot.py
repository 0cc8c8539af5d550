"""Tests for src/realtime/snapshot.py — public game views."""

import json
from dataclasses import replace

from src.engine.base import FinalRoundActive, GamePhase
from src.realtime.snapshot import GameSnapshot, PlayerView


class TestPlayerView:
    def test_excludes_secret(self, alice):
        view = PlayerView.from_player(alice)
        dumped = view.model_dump()
        assert "secret" not in dumped
        assert alice.secret not in json.dumps(view.model_dump(mode="json"))

    def test_camel_case_alias(self, alice):
        wire = PlayerView.from_player(alice).model_dump(by_alias=True)
        assert wire["playerId"] == "p1"
        assert wire["hasEnteredGame"] is False


class TestGameSnapshot:
    def test_no_game(self):
        snapshot = GameSnapshot.from_game(None)
        assert snapshot.game_id is None
        assert snapshot.players == []
        assert snapshot.turn is None

    def test_lobby(self, lobby_game):
        wire = GameSnapshot.from_game(lobby_game).to_wire()
        assert wire["gameId"] == lobby_game.game_id
        assert wire["phase"] == "lobby"
        assert wire["config"] == {"minimumEntryScore": 500, "targetScore": 10000}
        assert [p["name"] for p in wire["players"]] == ["Alice", "Bob"]
        assert wire["turn"] is None
        assert wire["rankings"] is None
        assert wire["finalRound"]["active"] is False

    def test_no_secret_anywhere(self, lobby_game):
        text = json.dumps(GameSnapshot.from_game(lobby_game).to_wire())
        for player in lobby_game.players:
            assert player.secret not in text
        assert "secret" not in text

    def test_turn_view(self, build_game):
        game = build_game([(1, False), (5, True), (2, True)], selected=(1,), accumulated=100)
        turn = GameSnapshot.from_game(game).to_wire()["turn"]
        assert turn["playerId"] == "p1"
        assert turn["dice"][0] == {"value": 1, "selectable": False}
        assert turn["accumulatedTurnScore"] == 100
        assert turn["selection"] == {
            "selectedIndices": [1],
            "isValid": True,
            "selectionScore": 50,
        }
        assert turn["status"] == "awaiting_roll"
        assert turn["bestSelectableScore"] == 50

    def test_unrevealed_dice(self, build_game):
        game = build_game([(None, False)] * 6)
        dice = GameSnapshot.from_game(game).to_wire()["turn"]["dice"]
        assert all(d["value"] is None for d in dice)

    def test_final_round(self, build_game):
        game = build_game([(1, True)], final_round=FinalRoundActive("p2", ("p1",)))
        final_round = GameSnapshot.from_game(game).to_wire()["finalRound"]
        assert final_round == {
            "active": True,
            "triggeringPlayerId": "p2",
            "remainingPlayerIds": ["p1"],
        }

    def test_rankings_only_when_finished(self, build_game, make_player):
        game = build_game(
            [(1, True)],
            players=[
                make_player("p1", "Alice", total_score=700),
                make_player("p2", "Bob", total_score=1200),
            ],
        )
        assert GameSnapshot.from_game(game).rankings is None

        finished = replace(game, phase=GamePhase.FINISHED, turn=None)
        rankings = GameSnapshot.from_game(finished).to_wire()["rankings"]
        assert rankings == [
            {"rank": 1, "playerId": "p2", "name": "Bob", "totalScore": 1200},
            {"rank": 2, "playerId": "p1", "name": "Alice", "totalScore": 700},
        ]

    def test_timestamps_serialize(self, lobby_game):
        wire = GameSnapshot.from_game(lobby_game).to_wire()
        assert isinstance(wire["createdAt"], str)
        assert wire["finishedAt"] is None
