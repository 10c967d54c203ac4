"""Player and roster models."""

import random
from datetime import datetime
from typing import Iterator, Optional
from pydantic import BaseModel, Field


class RosterEntry(BaseModel):
    """A room member as the host sees it.

    The id is stable across reconnects and is the identifier used
    everywhere in the game (turn order, moves, views).
    """

    id: str
    name: str = ""
    joined_at: datetime = Field(default_factory=datetime.now)


class Player(BaseModel):
    """Represents a player in one game instance.

    Rule sets subclass this to attach game-specific fields, e.g.:

        class DicePlayer(Player):
            score: int = 0
    """

    id: str
    ready: bool = False

    def roll_die(self, count: int = 1, rng: Optional[random.Random] = None) -> list[int]:
        """Roll `count` six-sided dice."""
        rng = rng or random
        return [rng.randint(1, 6) for _ in range(count)]

    def to_dict(self) -> dict:
        """Full serialized form, including game-defined fields."""
        return self.model_dump(mode="json")


class PlayerRegistry:
    """Ordered collection of the players of one game.

    Insertion order is roster order. Lookups return None for unknown ids
    instead of raising; callers must check.
    """

    def __init__(self, players: Optional[list[Player]] = None):
        self._players: list[Player] = []
        for player in players or []:
            self.add(player)

    def add(self, player: Player) -> None:
        if self.find(player.id) is not None:
            raise ValueError(f"Player {player.id} is already registered")
        self._players.append(player)

    def find(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        for player in self._players:
            if player.id == player_id:
                return player
        return None

    def remove(self, player_id: str) -> Optional[Player]:
        player = self.find(player_id)
        if player is not None:
            self._players.remove(player)
        return player

    def ids(self) -> list[str]:
        return [p.id for p in self._players]

    def all_ready(self) -> bool:
        return all(p.ready for p in self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players))

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, player_id: object) -> bool:
        return any(p.id == player_id for p in self._players)
