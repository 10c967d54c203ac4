"""Tests for the RuleSet base class and capability detection."""

import pytest

from gamenight.engine.rule_set import OPTIONAL_HOOKS, RuleSet, RuleSetCapabilities
from gamenight.models.game_state import Round
from gamenight.models.player import Player, RosterEntry


class MinimalRules(RuleSet):
    async def handle_move(self, payload):
        return payload

    async def handle_end(self, payload):
        return payload


class FullRules(MinimalRules):
    async def setup(self):
        return {"readyUp": False}

    async def handle_round_end(self, round):
        pass

    def view_for_player(self, state, player_id):
        return {}


class TestRuleSetDefaults:
    """Tests for the no-op hook defaults."""

    def test_required_hooks_are_abstract(self):
        class Incomplete(RuleSet):
            async def handle_move(self, payload):
                return payload

        with pytest.raises(TypeError):
            Incomplete()

    @pytest.mark.asyncio
    async def test_defaults(self):
        rules = MinimalRules()
        round = Round(number=3)

        assert await rules.setup() is None
        assert await rules.handle_ready_up("p1", {}) is True
        assert await rules.handle_round_start(round) is round
        assert await rules.handle_round_end(round) is None
        assert await rules.handle_turn_end(None) is None
        assert rules.view_for_player({"a": 1}, "p1") == {"a": 1}

    def test_default_player(self):
        player = MinimalRules().create_player(RosterEntry(id="p1", name="Alice"))
        assert type(player) is Player
        assert player.id == "p1"

    def test_attach(self):
        rules = MinimalRules()
        assert rules.game is None
        sentinel = object()
        rules.attach(sentinel)
        assert rules.game is sentinel


class TestRuleSetCapabilities:
    """Tests for detecting which hooks a rule set overrides."""

    def test_minimal(self):
        caps = RuleSetCapabilities.from_rule_set(MinimalRules())
        assert caps.provided() == []
        assert caps.setup is False

    def test_overrides_detected(self):
        caps = RuleSetCapabilities.from_rule_set(FullRules())
        assert caps.provided() == ["setup", "handle_round_end", "view_for_player"]

    def test_inherited_overrides_count(self):
        class Child(FullRules):
            pass

        assert RuleSetCapabilities.from_rule_set(Child()).setup is True

    def test_sync_setup_rejected(self):
        class SyncSetup(MinimalRules):
            def setup(self):
                return None

        with pytest.raises(TypeError, match="setup"):
            RuleSetCapabilities.from_rule_set(SyncSetup())

    def test_sync_end_rejected(self):
        class SyncEnd(RuleSet):
            async def handle_move(self, payload):
                return payload

            def handle_end(self, payload):
                return payload

        with pytest.raises(TypeError, match="handle_end"):
            RuleSetCapabilities.from_rule_set(SyncEnd())

    def test_sync_hooks_may_be_sync(self):
        """Non-suspending hooks are plain methods."""

        class SyncView(MinimalRules):
            def handle_turn_start(self, player, round, turn):
                pass

            def handle_player_leave(self, player):
                pass

        caps = RuleSetCapabilities.from_rule_set(SyncView())
        assert caps.handle_turn_start and caps.handle_player_leave

    def test_frozen(self):
        caps = RuleSetCapabilities.from_rule_set(MinimalRules())
        with pytest.raises(Exception):
            caps.setup = True

    def test_every_optional_hook_has_a_flag(self):
        assert set(OPTIONAL_HOOKS) == set(RuleSetCapabilities.model_fields)
