"""Events package."""

from gamenight.events.game_events import (
    GameEventName,
    RoomEventName,
    EventName,
    event_name,
    PlayerReady,
    TurnStarted,
)
from gamenight.events.event_log import (
    LoggedEvent,
    GameEventLog,
)
from gamenight.events.event_visibility import (
    public_players,
    redact_player_fields,
)

__all__ = [
    "GameEventName",
    "RoomEventName",
    "EventName",
    "event_name",
    "PlayerReady",
    "TurnStarted",
    "LoggedEvent",
    "GameEventLog",
    "public_players",
    "redact_player_fields",
]
