"""Game-level state models: settings, rounds, turns and recorded moves."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class GamePhase(str, Enum):
    """Lifecycle phase of a game controller."""

    CREATED = "CREATED"
    SETUP = "SETUP"
    READY_UP = "READY_UP"
    STARTED = "STARTED"
    ENDED = "ENDED"
    DESTROYED = "DESTROYED"


class DeparturePolicy(str, Enum):
    """What the controller does with a player who leaves mid-game."""

    IGNORE = "IGNORE"  # keep them in the turn order
    SKIP = "SKIP"  # drop them from the turn order, pass their turn
    ABORT = "ABORT"  # destroy the game


class GameSettings(BaseModel):
    """Settings of one game instance.

    Wire names are camelCase (readyUp, resultsTimeout) to match what
    clients receive; either spelling is accepted on input. Unknown keys
    are kept as game-defined settings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    ready_up: bool = Field(default=True, alias="readyUp")
    results_timeout: float = Field(default=10.0, alias="resultsTimeout", ge=0)  # seconds
    on_player_leave: DeparturePolicy = Field(default=DeparturePolicy.IGNORE, alias="onPlayerLeave")

    def merged(self, overrides: Optional[dict[str, Any]]) -> "GameSettings":
        """Return a copy with `overrides` applied on top."""
        overrides = dict(overrides or {})
        for name, field in type(self).model_fields.items():
            if field.alias and name in overrides:
                overrides[field.alias] = overrides.pop(name)
        data = self.model_dump(by_alias=True)
        data.update(overrides)
        return type(self).model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class GameDescriptor(BaseModel):
    """A playlist entry: which game to run and with which overrides."""

    name: str
    min_players: int = Field(default=1, ge=1)
    max_players: Optional[int] = None
    settings: dict[str, Any] = Field(default_factory=dict)


class Round(BaseModel):
    """The current round. Rule sets may attach extra fields."""

    model_config = ConfigDict(extra="allow")

    number: int = 0


class Turn(BaseModel):
    """The current turn; player_id is player_order[number - 1]."""

    number: int = 0
    player_id: Optional[str] = None


class MoveRecord(BaseModel):
    """An accepted move, as recorded in the move log and broadcast."""

    player_id: str
    round: int
    turn: int
    payload: Any = None
