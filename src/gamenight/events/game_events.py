"""Outbound notification names and payloads."""

from enum import Enum
from typing import Union
from pydantic import BaseModel

from gamenight.models.game_state import Round, Turn


class GameEventName(str, Enum):
    """Notifications a game sends to its host for fan-out."""

    INIT = "game/init"
    UPDATE = "game/update"
    PLAYER_READY = "game/player_ready"
    TURN = "game/turn"
    MOVE = "game/move"
    END = "game/end"
    DESTROY = "game/destroy"


class RoomEventName(str, Enum):
    """Notifications a room sends to its members."""

    PLAYER_JOIN = "player_join"
    PLAYER_LEAVE = "player_leave"
    UPDATE_SETTINGS = "room/update_settings"
    UPDATE_PLAYLIST = "room/update_playlist"
    PLAYLIST_END = "room/playlist_end"


EventName = Union[GameEventName, RoomEventName, str]


def event_name(event: EventName) -> str:
    """Plain string form of an event name."""
    if isinstance(event, Enum):
        return str(event.value)
    return event


class PlayerReady(BaseModel):
    """Payload of game/player_ready."""

    player_id: str


class TurnStarted(BaseModel):
    """Payload of game/turn."""

    round: Round
    turn: Turn
