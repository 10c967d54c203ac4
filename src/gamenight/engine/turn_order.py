"""Turn order resolution."""

import random
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from gamenight.models.player import Player


class PlayerOrder(str, Enum):
    """Order requests that are not an explicit list of ids."""

    DEFAULT = "DEFAULT"  # roster (join) order
    RANDOM = "RANDOM"  # uniform random permutation


TurnOrderRequest = Union[Sequence[str], PlayerOrder, None]


class TurnOrderPolicy:
    """Turns an order request into a list of player ids.

    Explicit lists are taken verbatim: membership is not checked, so a
    list naming unknown players shows up later as turns nobody can take
    (the controller skips those). Duplicates are refused.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def resolve(self, players: Iterable[Player], order: TurnOrderRequest = None) -> list[str]:
        if order is None or order == PlayerOrder.DEFAULT:
            return [p.id for p in players]

        if order == PlayerOrder.RANDOM:
            shuffled = list(players)
            self._rng.shuffle(shuffled)
            return [p.id for p in shuffled]

        if isinstance(order, str):
            raise ValueError(f"Unknown turn order request: {order!r}")

        ids = list(order)
        seen: set[str] = set()
        for player_id in ids:
            if player_id in seen:
                raise ValueError(f"Duplicate player id in turn order: {player_id}")
            seen.add(player_id)
        return ids
