"""Stub bots for the CLI and for tests.

A StubBot plays any bundled game without a human: it looks at its own
view of the game and returns a legal move. Useful for:
- Integration tests (full playlist runs without clients)
- Watching a game in the terminal
"""

import random
from typing import Any, Optional, Protocol


class Participant(Protocol):
    """Anything that can take a turn for a player."""

    player_id: str

    async def choose_move(self, view: dict[str, Any]) -> Any:
        """Return the payload to send for this player's turn."""
        ...

    async def ready_payload(self, view: dict[str, Any]) -> Any:
        """Return the payload to send when readying up."""
        ...


class StubBot:
    """Random HighRoll player.

    Rolls most of the time and holds otherwise. `hold_chance` of 0.0
    makes it roll every turn.
    """

    def __init__(self, player_id: str, seed: Optional[int] = None, hold_chance: float = 0.2):
        self.player_id = player_id
        self.hold_chance = hold_chance
        self._rng = random.Random(seed)

    async def ready_payload(self, view: dict[str, Any]) -> Any:
        return {}

    async def choose_move(self, view: dict[str, Any]) -> dict[str, str]:
        if self._rng.random() < self.hold_chance:
            return {"action": "hold"}
        return {"action": "roll"}


def create_stub_bots(player_ids: list[str], seed: Optional[int] = None, hold_chance: float = 0.2) -> dict[str, StubBot]:
    """One bot per player; seeds are offset per seat for variety."""
    return {
        player_id: StubBot(
            player_id,
            seed=None if seed is None else seed + seat,
            hold_chance=hold_chance,
        )
        for seat, player_id in enumerate(player_ids)
    }
