"""Bundled rule sets, looked up by slug."""

from typing import Any, Callable

from gamenight.engine.errors import RoomError
from gamenight.engine.rule_set import RuleSet
from gamenight.games.high_roll import HighRoll, DicePlayer

GAMES: dict[str, Callable[..., RuleSet]] = {
    "high-roll": HighRoll,
}


def load_game(slug: str, **options: Any) -> RuleSet:
    """Build a fresh rule set for a playlist entry.

    Raises:
        RoomError: No bundled game has this slug.
    """
    factory = GAMES.get(slug)
    if factory is None:
        raise RoomError(f"Unknown game: {slug}")
    return factory(**options)


__all__ = [
    "GAMES",
    "load_game",
    "HighRoll",
    "DicePlayer",
]
