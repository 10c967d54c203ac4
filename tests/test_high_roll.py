"""Tests for the HighRoll rule set, driven through a GameController."""

import random

import pytest

from gamenight.engine.errors import MoveRejected, RoomError
from gamenight.engine.game import GameController
from gamenight.games import GAMES, load_game
from gamenight.games.high_roll import DicePlayer, HighRoll
from gamenight.models.game_state import GameDescriptor
from gamenight.models.player import RosterEntry


class RecordingHost:
    """Minimal GameHost that keeps (event, payload) pairs."""

    def __init__(self, ids):
        self.players = [RosterEntry(id=i) for i in ids]
        self.events = []

    def broadcast(self, event, payload=None):
        self.events.append((event, payload))

    def broadcast_secret(self, event, build):
        for entry in self.players:
            self.events.append((event, build(entry.id)))


async def start_high_roll(ids=("p1", "p2"), ready=True, **options):
    overrides = options.pop("overrides", {})
    rules = HighRoll(rng=random.Random(5), **options)
    host = RecordingHost(ids)
    game = GameController(GameDescriptor(name="High Roll", settings=overrides), host, rules)
    await game.init()
    if ready and not game.started:
        for player_id in ids:
            await game.ready_up(player_id)
    return game, rules


ROLL = {"action": "roll"}
HOLD = {"action": "hold"}


class TestHighRollSetup:
    """Tests for setup and ready-up."""

    @pytest.mark.asyncio
    async def test_players_are_dice_players(self):
        game, _ = await start_high_roll()
        assert all(isinstance(p, DicePlayer) for p in game.players)
        assert game.to_json()["players"][0]["score"] == 0

    @pytest.mark.asyncio
    async def test_waits_for_ready_up(self):
        game, _ = await start_high_roll(ready=False)
        assert not game.started
        ack = await game.ready_up("p1")
        assert ack == {"player_id": "p1", "target": 30}

    @pytest.mark.asyncio
    async def test_ready_up_can_be_disabled(self):
        game, _ = await start_high_roll(ready=False, ready_up=False)
        assert game.started

    @pytest.mark.asyncio
    async def test_descriptor_overrides(self):
        game, rules = await start_high_roll(overrides={"target": 12, "rounds": 2, "dice": 1})
        assert rules.target == 12
        assert rules.dice == 1
        assert game.max_rounds == 2
        assert game.settings.model_extra["target"] == 12

    @pytest.mark.asyncio
    async def test_round_bonus(self):
        game, _ = await start_high_roll()
        bonus = game.round.model_extra["bonus"]
        assert 1 <= bonus <= 6


class TestHighRollMoves:
    """Tests for rolling and holding."""

    @pytest.mark.asyncio
    async def test_bad_move(self):
        game, _ = await start_high_roll()
        with pytest.raises(MoveRejected, match="roll"):
            await game.play_move("p1", {"action": "cheat"})
        with pytest.raises(MoveRejected):
            await game.play_move("p1", "roll")
        assert game.moves == []

    @pytest.mark.asyncio
    async def test_roll_scores_dice_plus_bonus(self):
        game, _ = await start_high_roll()
        bonus = game.round.model_extra["bonus"]

        record = await game.play_move("p1", ROLL)
        assert record.payload["action"] == "roll"
        assert len(record.payload["dice"]) == 2
        assert record.payload["bonus"] == bonus

        p1 = game.find_player("p1")
        assert p1.score == sum(record.payload["dice"]) + bonus
        assert p1.rolls == [p1.score]

    @pytest.mark.asyncio
    async def test_hold(self):
        game, _ = await start_high_roll()
        record = await game.play_move("p1", HOLD)
        assert record.payload == {"action": "hold"}
        assert game.find_player("p1").score == 0

    @pytest.mark.asyncio
    async def test_scores_hidden_until_end(self):
        game, _ = await start_high_roll(target=1)
        await game.play_move("p1", HOLD)
        await game.play_move("p2", ROLL)

        # Target 1 means the first roll wins
        assert game.ended
        view = game.to_json_for_player("p1")
        assert view["players"][1]["score"] > 0

    @pytest.mark.asyncio
    async def test_other_scores_redacted(self):
        game, _ = await start_high_roll()
        await game.play_move("p1", ROLL)
        view = game.to_json_for_player("p2")
        assert view["players"][0]["score"] is None
        assert view["players"][0]["rolls"] is None
        assert view["players"][1]["score"] == 0
        assert game.to_json_for_player("p1")["players"][0]["score"] > 0


class TestHighRollEnding:
    """Tests for the win conditions."""

    @pytest.mark.asyncio
    async def test_target_reached(self):
        game, _ = await start_high_roll(target=1)
        await game.play_move("p1", ROLL)

        assert game.ended
        assert game.end_results["winner"] == "p1"
        assert game.end_results["reason"] == "target"
        assert set(game.end_results["scores"]) == {"p1", "p2"}

    @pytest.mark.asyncio
    async def test_everybody_holds_replays_round(self):
        game, _ = await start_high_roll()
        await game.play_move("p1", HOLD)
        await game.play_move("p2", HOLD)
        assert game.round.number == 1
        assert game.turn.player_id == "p1"

    @pytest.mark.asyncio
    async def test_rounds_exhausted(self):
        game, _ = await start_high_roll(target=1000, rounds=1)
        await game.play_move("p1", ROLL)
        await game.play_move("p2", ROLL)

        assert game.ended
        results = game.end_results
        assert results["reason"] == "rounds"
        assert results["winner"] == max(results["scores"], key=results["scores"].get)


class TestGameRegistry:
    """Tests for looking games up by slug."""

    def test_load_game(self):
        rules = load_game("high-roll", target=5)
        assert isinstance(rules, HighRoll)
        assert rules.target == 5
        assert "high-roll" in GAMES

    def test_unknown_game(self):
        with pytest.raises(RoomError, match="Unknown game: go"):
            load_game("go")
