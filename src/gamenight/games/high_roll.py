"""HighRoll - a small dice race used by the CLI and the integration tests.

Rules:
    - Each round a bonus die is rolled; it is added to every roll that round.
    - On their turn a player either rolls (dice + bonus go to their score)
      or holds.
    - The first player to reach the target score wins at the end of their
      turn.
    - A round in which everybody held is replayed.
    - After the last round the highest score wins.

Scores and roll history are private until the game ends.
"""

import random
from typing import Any, Optional
from pydantic import Field

from gamenight.engine.errors import EndGame, MoveRejected, RestartRound
from gamenight.engine.rule_set import RuleSet
from gamenight.events.event_visibility import redact_player_fields
from gamenight.models.game_state import Round
from gamenight.models.player import Player, RosterEntry

DEFAULT_TARGET = 30
DEFAULT_ROUNDS = 5
DEFAULT_DICE = 2

ACTIONS = ("roll", "hold")
PRIVATE_FIELDS = ("score", "rolls")


class DicePlayer(Player):
    """Player with a running score and a private roll history."""

    score: int = 0
    rolls: list[int] = Field(default_factory=list)


class HighRoll(RuleSet):
    """Dice race rule set."""

    def __init__(
        self,
        target: int = DEFAULT_TARGET,
        rounds: int = DEFAULT_ROUNDS,
        dice: int = DEFAULT_DICE,
        ready_up: bool = True,
        rng: Optional[random.Random] = None,
    ):
        self.target = target
        self.rounds = rounds
        self.dice = dice
        self.ready_up = ready_up
        self._rng = rng or random.Random()
        self._rolled_this_round: set[str] = set()

    def create_player(self, entry: RosterEntry) -> DicePlayer:
        return DicePlayer(id=entry.id)

    async def setup(self) -> dict[str, Any]:
        # Playlist overrides (descriptor settings) win over constructor values
        extra = self.game.settings.model_extra or {}
        self.target = int(extra.get("target", self.target))
        self.rounds = int(extra.get("rounds", self.rounds))
        self.dice = int(extra.get("dice", self.dice))

        self.game.set_max_rounds(self.rounds)
        return {
            "readyUp": self.ready_up,
            "target": self.target,
            "rounds": self.rounds,
            "dice": self.dice,
        }

    async def handle_ready_up(self, player_id: str, payload: Any) -> dict[str, Any]:
        return {"player_id": player_id, "target": self.target}

    async def handle_round_start(self, round: Round) -> Round:
        self._rolled_this_round.clear()
        return Round(number=round.number, bonus=self._rng.randint(1, 6))

    async def handle_move(self, payload: Any) -> dict[str, Any]:
        action = payload.get("action") if isinstance(payload, dict) else None
        if action not in ACTIONS:
            raise MoveRejected('Send {"action": "roll"} or {"action": "hold"}.')

        if action == "hold":
            return {"action": "hold"}

        player = self.game.current_player()
        bonus = (self.game.round.model_extra or {}).get("bonus", 0)
        dice = player.roll_die(self.dice, rng=self._rng)
        gained = sum(dice) + bonus
        player.score += gained
        player.rolls.append(gained)
        self._rolled_this_round.add(player.id)
        return {"action": "roll", "dice": dice, "bonus": bonus}

    async def handle_turn_end(self, player: Optional[DicePlayer]) -> None:
        if player is not None and player.score >= self.target:
            raise EndGame({"winner": player.id, "reason": "target"})

    async def handle_round_end(self, round: Round) -> None:
        if not self._rolled_this_round:
            raise RestartRound(f"Everybody held in round {round.number}")

    async def handle_end(self, payload: Any) -> dict[str, Any]:
        scores = {p.id: p.score for p in self.game.players}
        if payload and payload.get("winner"):
            winner = payload["winner"]
            reason = payload.get("reason", "target")
        else:
            winner = max(scores, key=lambda pid: scores[pid]) if scores else None
            reason = "rounds"
        return {"winner": winner, "reason": reason, "scores": scores}

    def view_for_player(self, state: dict[str, Any], player_id: str) -> dict[str, Any]:
        if state.get("endResults") is not None:
            return state
        return redact_player_fields(state, player_id, PRIVATE_FIELDS)
