"""RuleSet - the hooks a concrete game implements.

The controller owns all game state and drives the lifecycle; a rule set
only answers questions (is this move legal? who won?) through hooks.

Usage:
    class Hangman(RuleSet):
        async def handle_move(self, payload):
            if not is_letter(payload.get("guess")):
                raise MoveRejected("Guess a single letter.")
            return payload

        async def handle_end(self, payload):
            return {"winner": payload}

    game = GameController(descriptor, room, Hangman())

Only handle_move and handle_end are required. Every other hook has a
no-op default here; RuleSetCapabilities records which ones a concrete
class actually overrides. Hooks that may suspend are coroutines.

Inside hooks, `self.game` is the controller. Read through its accessors
(round, turn, players, current_player(), ...) and change it only
through set_player_turn_order, set_max_rounds and update_settings.
Never call its locked entry points (play_move, ready_up, ...) from a
hook; finish the game by raising EndGame instead.
"""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Optional, TYPE_CHECKING
from pydantic import BaseModel, ConfigDict

from gamenight.models.player import Player, RosterEntry
from gamenight.models.game_state import Round, Turn

if TYPE_CHECKING:
    from gamenight.engine.game import GameController


# Optional hooks and whether they must be coroutines
OPTIONAL_HOOKS: dict[str, bool] = {
    "setup": True,
    "handle_ready_up": True,
    "handle_turn_start": False,
    "handle_turn_end": True,
    "handle_round_start": True,
    "handle_round_end": True,
    "handle_player_leave": False,
    "view_for_player": False,
    "create_player": False,
}

REQUIRED_HOOKS: dict[str, bool] = {
    "handle_move": True,
    "handle_end": True,
}


class RuleSet(ABC):
    """Base class for concrete games."""

    game: Optional["GameController"] = None

    def attach(self, game: "GameController") -> None:
        """Called once by the controller that runs this rule set."""
        self.game = game

    # ------------------------------------------------------------------
    # Required hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def handle_move(self, payload: Any) -> Any:
        """Validate and apply a move by the current turn's player.

        Raise to refuse the move (the exception reaches the caller
        unchanged). The return value is what gets recorded and broadcast.
        """
        ...

    @abstractmethod
    async def handle_end(self, payload: Any) -> Any:
        """Build the final results from the end cause.

        payload is whatever EndGame carried, or None when the game ran
        out of rounds.
        """
        ...

    # ------------------------------------------------------------------
    # Optional hooks
    # ------------------------------------------------------------------

    async def setup(self) -> Optional[dict[str, Any]]:
        """Return settings overrides, e.g. {"readyUp": False}."""
        return None

    async def handle_ready_up(self, player_id: str, payload: Any) -> Any:
        return True

    def handle_turn_start(self, player: Player, round: Round, turn: Turn) -> None:
        pass

    async def handle_turn_end(self, player: Optional[Player]) -> None:
        pass

    async def handle_round_start(self, round: Round) -> Round:
        return round

    async def handle_round_end(self, round: Round) -> None:
        pass

    def handle_player_leave(self, player: Optional[Player]) -> None:
        pass

    def view_for_player(self, state: dict[str, Any], player_id: str) -> dict[str, Any]:
        return state

    def create_player(self, entry: RosterEntry) -> Player:
        return Player(id=entry.id)


class RuleSetCapabilities(BaseModel):
    """Which optional hooks a concrete rule set overrides.

    Built once when the controller is constructed.
    """

    model_config = ConfigDict(frozen=True)

    setup: bool = False
    handle_ready_up: bool = False
    handle_turn_start: bool = False
    handle_turn_end: bool = False
    handle_round_start: bool = False
    handle_round_end: bool = False
    handle_player_leave: bool = False
    view_for_player: bool = False
    create_player: bool = False

    @classmethod
    def from_rule_set(cls, rule_set: RuleSet) -> "RuleSetCapabilities":
        """Inspect a rule set.

        Raises:
            TypeError: If a hook that may suspend is not a coroutine
                function.
        """
        rule_cls = type(rule_set)
        for name, must_be_async in {**REQUIRED_HOOKS, **OPTIONAL_HOOKS}.items():
            if must_be_async and not inspect.iscoroutinefunction(getattr(rule_cls, name)):
                raise TypeError(f"{rule_cls.__name__}.{name} must be declared with 'async def'")

        provided = {
            name: getattr(rule_cls, name) is not getattr(RuleSet, name)
            for name in OPTIONAL_HOOKS
        }
        return cls(**provided)

    def provided(self) -> list[str]:
        return [name for name in OPTIONAL_HOOKS if getattr(self, name)]
