"""Room - a group of members playing through a playlist together."""

import asyncio
import logging
import random
import re
import uuid
from typing import Any, Callable, Literal, Optional, Union
from pydantic import BaseModel, Field

from gamenight.engine.errors import RoomError
from gamenight.engine.game import GameController
from gamenight.engine.rule_set import RuleSet
from gamenight.events.game_events import EventName, RoomEventName
from gamenight.models.game_state import GameDescriptor, GameSettings
from gamenight.models.player import RosterEntry
from gamenight.room.broadcaster import Broadcaster
from gamenight.room.playlist import Playlist

logger = logging.getLogger(__name__)

GameLoader = Callable[[str], RuleSet]

_SLUG_REMOVE = re.compile(r"[$*_+~.()'\"!\-:@]")


def slugify(name: str) -> str:
    """Lookup key for a game name, e.g. "High Roll!" -> "high-roll"."""
    cleaned = _SLUG_REMOVE.sub("", name)
    return "-".join(cleaned.lower().split())


def _generate_code() -> str:
    return uuid.uuid4().hex[:8]


class RoomSettings(BaseModel):
    """Room-level settings (not per game)."""

    privacy: Literal["public", "private"] = "public"
    mode: str = "party"
    player_limit: int = Field(default=16, ge=1)
    password: Optional[str] = None


class Room:
    """Members connected to each other and playing the same games.

    The room is the GameHost of its current game: it owns the roster and
    fans the game's notifications out through its Broadcaster.
    """

    def __init__(
        self,
        name: str,
        host: RosterEntry,
        settings: Union[RoomSettings, dict, None] = None,
        broadcaster: Optional[Broadcaster] = None,
        game_settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.name = name
        self.host = host.id
        self._players: list[RosterEntry] = []
        self.playlist = Playlist()
        if isinstance(settings, RoomSettings):
            self.settings = settings.model_copy()
        else:
            self.settings = RoomSettings.model_validate(settings or {})
        self.game_settings = game_settings

        # A private id for the room and a code to join with
        self.id = _generate_code()
        self.code = _generate_code()

        self.broadcaster = broadcaster or Broadcaster()
        self.game: Optional[GameController] = None
        self._loader: Optional[GameLoader] = None
        self._rng = rng
        self._next_game_task: Optional[asyncio.Task] = None

    # =========================================================================
    # GameHost
    # =========================================================================

    @property
    def players(self) -> list[RosterEntry]:
        return list(self._players)

    def broadcast(self, event: EventName, payload: Any = None) -> None:
        self.broadcaster.broadcast(event, payload)

    def broadcast_secret(self, event: EventName, build: Callable[[str], Any]) -> None:
        self.broadcaster.broadcast_secret(event, build)

    # =========================================================================
    # Membership
    # =========================================================================

    def find_player(self, member_id: str) -> Optional[RosterEntry]:
        for entry in self._players:
            if entry.id == member_id:
                return entry
        return None

    def add_player(self, entry: RosterEntry, password: Optional[str] = None) -> dict[str, Any]:
        """Let a member in (or back in).

        Returns:
            The room as this member sees it, with their view of the
            running game under "game".

        Raises:
            RoomError: The room is full or the password is missing/wrong.
        """
        exists = self.find_player(entry.id) is not None
        if not exists and len(self._players) >= self.settings.player_limit:
            raise RoomError("Room is full.")

        if self.settings.privacy == "private":
            if not password:
                raise RoomError("Room is private. Password required to enter.")
            if password != self.settings.password:
                raise RoomError("Incorrect password.")

        if not exists:
            self._players.append(entry)
            logger.info("[%s] %s joined", self.name, entry.id)

        view = self.to_json()
        if self.game is not None:
            view["game"] = self.game.to_json_for_player(entry.id)

        if len(self._players) > 1:
            self.broadcast(RoomEventName.PLAYER_JOIN, {"player": entry.model_dump(mode="json")})

        return view

    async def remove_player(self, member_id: str) -> None:
        """Take a member out; the running game is told about it."""
        entry = self.find_player(member_id)
        if entry is None:
            raise RoomError("Not in room.")

        self._players.remove(entry)
        self.broadcaster.disconnect(member_id)
        logger.info("[%s] %s left", self.name, member_id)

        # Members leave freely before the playlist starts
        if self.playlist.started and self.game is not None:
            await self.game.handle_player_leave(member_id)

        if self._players:
            self.broadcast(RoomEventName.PLAYER_LEAVE, {"player": entry.model_dump(mode="json")})

    # =========================================================================
    # Settings
    # =========================================================================

    def set_name(self, name: str) -> None:
        self.name = name
        self.broadcast(RoomEventName.UPDATE_SETTINGS, {
            "room": self.to_json(),
            "changes": [f"Room name changed to {self.name}."],
        })

    def change_host(self, member_id: str) -> RosterEntry:
        new_host = self.find_player(member_id)
        if new_host is None:
            raise RoomError("Player is not in room.")
        old_host = self.find_player(self.host)
        self.host = new_host.id

        old_name = old_host.name if old_host else "The host"
        self.broadcast(RoomEventName.UPDATE_SETTINGS, {
            "room": self.to_json(),
            "changes": [f"{old_name} made {new_host.name} the host."],
        })
        return new_host

    def update_settings(self, changes: dict[str, Any]) -> RoomSettings:
        data = self.settings.model_dump()
        privacy = changes.get("privacy")
        privacy_changed = bool(privacy) and privacy != data["privacy"]
        if privacy_changed:
            data["privacy"] = privacy
        if changes.get("password") and data["privacy"] == "private":
            data["password"] = changes["password"]
        if changes.get("player_limit"):
            data["player_limit"] = changes["player_limit"]
        self.settings = RoomSettings.model_validate(data)
        if privacy_changed:
            # Old join codes stop working when privacy changes
            self.code = _generate_code()
        return self.settings

    # =========================================================================
    # Playlist
    # =========================================================================

    def add_game(self, game: GameDescriptor) -> bool:
        added = self.playlist.add(game)
        self.broadcast(RoomEventName.UPDATE_PLAYLIST, {"playlist": self.playlist.to_json()})
        return added

    async def start(self, loader: Optional[GameLoader] = None) -> Optional[GameController]:
        """Start the next game of the playlist.

        Args:
            loader: Maps a game slug to a fresh RuleSet. Remembered for the
                    following games.

        Returns:
            The running game, or None when the playlist is exhausted.
        """
        if loader is not None:
            self._loader = loader
        if self._loader is None:
            raise RoomError("No game loader.")

        descriptor = self.playlist.next()
        if descriptor is None:
            self.game = None
            self.broadcast(RoomEventName.PLAYLIST_END)
            return None

        rule_set = self._loader(slugify(descriptor.name))
        game = GameController(descriptor, self, rule_set, settings=self.game_settings, rng=self._rng)
        game.add_end_listener(self._on_game_end)
        game.add_destroy_listener(self._on_game_destroy)
        self.game = game

        self.broadcast(RoomEventName.UPDATE_PLAYLIST, {"playlist": self.playlist.to_json()})
        logger.info("[%s] Starting %s", self.name, descriptor.name)
        await game.init()
        return game

    @property
    def next_game_task(self) -> Optional[asyncio.Task]:
        """The pending hop to the next playlist entry, if any."""
        return self._next_game_task

    def close(self) -> None:
        if self._next_game_task is not None and not self._next_game_task.done():
            self._next_game_task.cancel()

    def _on_game_end(self, results: Any) -> None:
        timeout = self.game.settings.results_timeout if self.game else 0.0
        self._next_game_task = asyncio.get_running_loop().create_task(self._start_after(timeout))
        self._next_game_task.add_done_callback(self._log_next_game_failure)

    def _log_next_game_failure(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("[%s] Starting the next game failed", self.name, exc_info=exc)

    def _on_game_destroy(self) -> None:
        logger.info("[%s] Game destroyed", self.name)
        self.game = None

    async def _start_after(self, delay: float) -> None:
        # Give clients time to show the results
        await asyncio.sleep(delay)
        await self.start()

    def to_json(self) -> dict[str, Any]:
        """The room without its password, id or running game."""
        settings = self.settings.model_dump(mode="json")
        settings.pop("password", None)
        return {
            "name": self.name,
            "code": self.code,
            "host": self.host,
            "players": [p.model_dump(mode="json") for p in self._players],
            "playlist": self.playlist.to_json(),
            "settings": settings,
        }
