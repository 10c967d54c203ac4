"""Models package."""

from gamenight.models.player import (
    RosterEntry,
    Player,
    PlayerRegistry,
)
from gamenight.models.game_state import (
    GamePhase,
    DeparturePolicy,
    GameSettings,
    GameDescriptor,
    Round,
    Turn,
    MoveRecord,
)

__all__ = [
    "RosterEntry",
    "Player",
    "PlayerRegistry",
    "GamePhase",
    "DeparturePolicy",
    "GameSettings",
    "GameDescriptor",
    "Round",
    "Turn",
    "MoveRecord",
]
