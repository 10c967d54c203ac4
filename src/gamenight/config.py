"""Game night configuration, loaded from YAML.

Example file:

    room: Friday Dice
    players: [alice, bob, carol]
    seed: 7
    results_timeout: 0.5
    room_settings:
      privacy: public
      player_limit: 8
    playlist:
      - name: High Roll
        min_players: 2
        settings: {target: 25, rounds: 4}
"""

import logging
from pathlib import Path
from typing import Optional, Union
import yaml
from pydantic import BaseModel, Field, field_validator

from gamenight.models.game_state import GameDescriptor, GameSettings
from gamenight.room.room import RoomSettings

DEFAULT_PLAYERS = ["alice", "bob", "carol"]


class GameNightConfig(BaseModel):
    """Everything needed to run a room of bots through a playlist."""

    room: str = "Game Night"
    players: list[str] = Field(default_factory=lambda: list(DEFAULT_PLAYERS))
    playlist: list[GameDescriptor] = Field(
        default_factory=lambda: [GameDescriptor(name="High Roll", min_players=1)]
    )
    room_settings: RoomSettings = Field(default_factory=RoomSettings)
    results_timeout: float = Field(default=0.0, ge=0)
    seed: Optional[int] = None
    log_level: str = "WARNING"

    @field_validator("players")
    @classmethod
    def validate_players(cls, players: list[str]) -> list[str]:
        if not players:
            raise ValueError("at least one player is required")
        if len(set(players)) != len(players):
            raise ValueError("player names must be unique")
        return players

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, level: str) -> str:
        level = level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {level}")
        return level

    def game_settings(self) -> GameSettings:
        return GameSettings(results_timeout=self.results_timeout)


def load_config(path: Union[str, Path]) -> GameNightConfig:
    """Load a GameNightConfig from a YAML file.

    Raises:
        FileNotFoundError: The file does not exist.
        pydantic.ValidationError: The file content is invalid.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return GameNightConfig.model_validate(data)
