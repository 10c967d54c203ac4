"""Room package - the collaborators a game runs inside."""

from .broadcaster import Broadcaster
from .playlist import Playlist, MAX_PLAYLIST_GAMES
from .room import Room, RoomSettings, GameLoader, slugify

__all__ = [
    "Broadcaster",
    "Playlist",
    "MAX_PLAYLIST_GAMES",
    "Room",
    "RoomSettings",
    "GameLoader",
    "slugify",
]
