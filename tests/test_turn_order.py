"""Tests for TurnOrderPolicy."""

import random

import pytest

from gamenight.engine.turn_order import PlayerOrder, TurnOrderPolicy
from gamenight.models.player import Player


def make_players(*ids):
    return [Player(id=i) for i in ids]


class TestTurnOrderPolicy:
    """Tests for resolving order requests."""

    def test_default_is_roster_order(self):
        policy = TurnOrderPolicy()
        players = make_players("c", "a", "b")
        assert policy.resolve(players) == ["c", "a", "b"]
        assert policy.resolve(players, PlayerOrder.DEFAULT) == ["c", "a", "b"]
        assert policy.resolve(players, "DEFAULT") == ["c", "a", "b"]

    def test_random_is_a_permutation(self):
        policy = TurnOrderPolicy(random.Random(3))
        players = make_players(*"abcdefgh")
        order = policy.resolve(players, PlayerOrder.RANDOM)
        assert sorted(order) == list("abcdefgh")

    def test_random_does_not_touch_input(self):
        policy = TurnOrderPolicy(random.Random(3))
        players = make_players(*"abcdefgh")
        policy.resolve(players, PlayerOrder.RANDOM)
        assert [p.id for p in players] == list("abcdefgh")

    def test_random_is_seeded(self):
        players = make_players(*"abcdefgh")
        first = TurnOrderPolicy(random.Random(11)).resolve(players, PlayerOrder.RANDOM)
        second = TurnOrderPolicy(random.Random(11)).resolve(players, PlayerOrder.RANDOM)
        assert first == second

    def test_random_varies(self):
        players = make_players(*"abcdefgh")
        orders = {
            tuple(TurnOrderPolicy(random.Random(seed)).resolve(players, PlayerOrder.RANDOM))
            for seed in range(20)
        }
        assert len(orders) > 1

    def test_explicit_list_verbatim(self):
        policy = TurnOrderPolicy()
        players = make_players("a", "b")
        assert policy.resolve(players, ["b", "a"]) == ["b", "a"]
        # Membership is not checked
        assert policy.resolve(players, ["b", "ghost"]) == ["b", "ghost"]
        assert policy.resolve(players, []) == []

    def test_duplicates_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            TurnOrderPolicy().resolve(make_players("a"), ["a", "a"])

    def test_unknown_request_rejected(self):
        with pytest.raises(ValueError):
            TurnOrderPolicy().resolve(make_players("a"), "ALPHABETICAL")
