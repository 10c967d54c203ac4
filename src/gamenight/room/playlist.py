"""The ordered list of games a room will run."""

from typing import Optional

from gamenight.models.game_state import GameDescriptor

# Maximum number of games queued in one playlist
MAX_PLAYLIST_GAMES = 10


class Playlist:
    """Games queued for a room, played front to back."""

    def __init__(self, games: Optional[list[GameDescriptor]] = None):
        self.games: list[GameDescriptor] = []
        self.index = -1
        for game in games or []:
            self.add(game)

    def add(self, game: GameDescriptor) -> bool:
        """Queue a game. Returns False when the playlist is full."""
        if len(self.games) >= MAX_PLAYLIST_GAMES:
            return False
        self.games.append(game)
        return True

    def next(self) -> Optional[GameDescriptor]:
        """Move to the next game; None once the list is exhausted."""
        if self.index < len(self.games):
            self.index += 1
        return self.current

    @property
    def current(self) -> Optional[GameDescriptor]:
        if 0 <= self.index < len(self.games):
            return self.games[self.index]
        return None

    @property
    def started(self) -> bool:
        return self.index > -1

    def to_json(self) -> dict:
        return {
            "games": [g.model_dump(mode="json") for g in self.games],
            "index": self.index,
        }
