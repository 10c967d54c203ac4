"""GameController - drives one game through its complete lifecycle."""

import asyncio
import copy
import logging
import random
from typing import Any, Callable, Optional

from gamenight.engine.errors import (
    AlreadyReady,
    EndGame,
    GameEnded,
    GameFlowError,
    GameNotStarted,
    NotYourTurn,
    ReadyUpClosed,
    RestartRound,
    UnknownPlayer,
)
from gamenight.engine.host import GameHost
from gamenight.engine.rule_set import RuleSet, RuleSetCapabilities
from gamenight.engine.turn_order import TurnOrderPolicy, TurnOrderRequest
from gamenight.events.game_events import GameEventName, PlayerReady, TurnStarted
from gamenight.models.game_state import (
    DeparturePolicy,
    GameDescriptor,
    GamePhase,
    GameSettings,
    MoveRecord,
    Round,
    Turn,
)
from gamenight.models.player import Player, PlayerRegistry

logger = logging.getLogger(__name__)

EndListener = Callable[[Any], None]
DestroyListener = Callable[[], None]


class GameController:
    """Runs one game attempt for a room.

    Game Flow:
        1. init: players are created from the host roster, setup runs
        2. Ready-up: every player readies (skipped when readyUp is false
           or the rule set has no setup)
        3. Round N: handle_round_start, then one turn per entry of
           player_order; each accepted move ends the turn
        4. handle_round_end decides: next round, same round again, or end
        5. End: handle_end builds the results, listeners are told

    Entry points that change state (init, ready_up, play_move,
    handle_player_leave, end_game) are serialized by a per-game lock held
    across every hook they await, so one request is processed at a time.
    """

    def __init__(
        self,
        descriptor: GameDescriptor,
        host: GameHost,
        rule_set: RuleSet,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the GameController.

        Args:
            descriptor: The playlist entry being played (name, min players,
                        settings overrides).
            host: The room the game runs in.
            rule_set: The concrete game.
            settings: Base settings; descriptor.settings are applied on top.
            rng: Optional random source for RANDOM turn orders.

        Raises:
            TypeError: If a suspending hook of the rule set is not async.
        """
        self.descriptor = descriptor
        self.host = host
        self.rule_set = rule_set
        self.capabilities = RuleSetCapabilities.from_rule_set(rule_set)
        logger.debug(
            "[%s] %s provides hooks: %s",
            descriptor.name,
            type(rule_set).__name__,
            ", ".join(self.capabilities.provided()) or "none",
        )

        self._registry = PlayerRegistry()
        self._turn_order = TurnOrderPolicy(rng)
        self._settings = (settings or GameSettings()).merged(descriptor.settings)
        self._phase = GamePhase.CREATED
        self._started = False
        self._moves: list[MoveRecord] = []
        self._round = Round()
        self._turn = Turn()
        self._max_rounds: Optional[int] = None
        self._player_order: list[str] = [entry.id for entry in host.players]
        self._end_results: Any = None
        self._ending = False
        self._end_payload: Any = None
        self._round_had_turn = False

        self._lock = asyncio.Lock()
        self._end_listeners: list[EndListener] = []
        self._destroy_listeners: list[DestroyListener] = []

        rule_set.attach(self)

    # =========================================================================
    # Read accessors
    # =========================================================================

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def started(self) -> bool:
        return self._started

    @property
    def ended(self) -> bool:
        return self._phase == GamePhase.ENDED

    @property
    def destroyed(self) -> bool:
        return self._phase == GamePhase.DESTROYED

    @property
    def end_results(self) -> Any:
        return self._end_results

    @property
    def players(self) -> list[Player]:
        """Players in roster order. The list is a copy; the players are not."""
        return list(self._registry)

    @property
    def round(self) -> Round:
        return self._round.model_copy(deep=True)

    @property
    def turn(self) -> Turn:
        return self._turn.model_copy()

    @property
    def moves(self) -> list[MoveRecord]:
        return [m.model_copy(deep=True) for m in self._moves]

    @property
    def settings(self) -> GameSettings:
        return self._settings.model_copy(deep=True)

    @property
    def player_order(self) -> list[str]:
        return list(self._player_order)

    @property
    def max_rounds(self) -> Optional[int]:
        return self._max_rounds

    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        """Find a player by id. Returns None if absent."""
        return self._registry.find(player_id)

    def current_player(self) -> Optional[Player]:
        """The player whose turn it is, if any."""
        return self._registry.find(self._turn.player_id)

    # =========================================================================
    # Mutation requests (safe to call from rule set hooks)
    # =========================================================================

    def set_player_turn_order(self, order: TurnOrderRequest = None) -> list[str]:
        """Set the order players take their turns in.

        Args:
            order: A list of player ids (used verbatim), PlayerOrder.RANDOM,
                   or PlayerOrder.DEFAULT / None for roster order.

        Returns:
            The new player order.
        """
        players = list(self._registry) or [Player(id=e.id) for e in self.host.players]
        self._player_order = self._turn_order.resolve(players, order)
        logger.debug("[%s] Turn order: %s", self.name, self._player_order)
        return list(self._player_order)

    def set_max_rounds(self, max_rounds: Optional[int]) -> None:
        if max_rounds is not None and max_rounds < 1:
            raise ValueError(f"max_rounds must be >= 1, got {max_rounds}")
        self._max_rounds = max_rounds

    def update_settings(self, overrides: dict[str, Any]) -> GameSettings:
        self._settings = self._settings.merged(overrides)
        return self.settings

    def add_end_listener(self, listener: EndListener) -> None:
        """Call listener(results) once the game has ended."""
        self._end_listeners.append(listener)

    def add_destroy_listener(self, listener: DestroyListener) -> None:
        self._destroy_listeners.append(listener)

    # =========================================================================
    # Entry points
    # =========================================================================

    async def init(self) -> None:
        """Create the players and boot the game up."""
        async with self._lock:
            if self._phase != GamePhase.CREATED:
                raise GameFlowError(f"Game {self.name} was already initialised")

            for entry in self.host.players:
                self._registry.add(self.rule_set.create_player(entry))
            logger.info("[%s] Initialised with %d players", self.name, len(self._registry))

            if not self.capabilities.setup:
                await self._start()
                return

            self._phase = GamePhase.SETUP
            overrides = await self.rule_set.setup()
            self._settings = self._settings.merged(overrides)

            # Clients get the initial game object, then ready up
            self.broadcast_update(GameEventName.INIT)

            if not self._settings.ready_up:
                await self._start()
            else:
                self._phase = GamePhase.READY_UP

    async def ready_up(self, player_id: str, payload: Any = None) -> Any:
        """Mark a player as ready; the last one to ready starts the game.

        Returns:
            The acknowledgement from handle_ready_up (True by default), or
            the falsy value it returned when it declined.

        Raises:
            ReadyUpClosed: The game has already started or is over.
            UnknownPlayer: player_id is not in this game.
            AlreadyReady: The player is already ready.
            Exception: Whatever handle_ready_up raised.
        """
        async with self._lock:
            if self._started or self._is_over():
                raise ReadyUpClosed()
            player = self._registry.find(player_id)
            if player is None:
                raise UnknownPlayer()
            if player.ready:
                raise AlreadyReady()

            ack = await self.rule_set.handle_ready_up(player_id, payload)
            if ack is None:
                ack = True
            if not ack:
                logger.debug("[%s] Ready-up from %s declined", self.name, player_id)
                return ack

            player.ready = True
            self.host.broadcast(
                GameEventName.PLAYER_READY,
                PlayerReady(player_id=player_id).model_dump(mode="json"),
            )

            if self._registry.all_ready():
                await self._start()

            return ack

    async def play_move(self, player_id: str, payload: Any = None) -> MoveRecord:
        """Handle a move request from a player.

        Returns:
            The recorded move envelope.

        Raises:
            GameEnded, GameNotStarted, NotYourTurn: checked in that order,
                before the rule set sees the move.
            Exception: Whatever handle_move raised; nothing is recorded.
            GameFlowError: No player in the turn order can take a turn.

        Hooks that fail after the move is recorded (turn/round hooks, or
        handle_end reached through an end signal) are logged, not raised:
        the move stands either way.
        """
        async with self._lock:
            if self._is_over():
                raise GameEnded()
            if self._turn.number == 0:
                raise GameNotStarted()
            # TODO: let rule sets accept out-of-turn actions (e.g. reactions)
            if player_id != self._turn.player_id:
                logger.debug("[%s] Out-of-turn move from %s", self.name, player_id)
                raise NotYourTurn()

            accepted = await self.rule_set.handle_move(payload)

            record = MoveRecord(
                player_id=player_id,
                round=self._round.number,
                turn=self._turn.number,
                payload=accepted,
            )
            self._moves.append(record)
            self.host.broadcast(GameEventName.MOVE, record.model_dump(mode="json"))

            # The move is recorded; later hook failures are not the mover's
            try:
                await self._next_turn()
            except GameFlowError:
                raise
            except Exception:
                logger.exception("[%s] Advancing after the move of %s failed", self.name, player_id)

            return record.model_copy(deep=True)

    async def handle_player_leave(self, player_id: str) -> None:
        """The host reports that a member left the room."""
        async with self._lock:
            if self._phase in (GamePhase.ENDED, GamePhase.DESTROYED):
                return

            self.rule_set.handle_player_leave(self._registry.find(player_id))

            if len(self.host.players) < self.descriptor.min_players:
                logger.info("[%s] Below %s players", self.name, self.descriptor.min_players)
                self.destroy()
                return

            policy = self._settings.on_player_leave
            if policy == DeparturePolicy.ABORT:
                self.destroy()
            elif policy == DeparturePolicy.SKIP:
                await self._drop_player(player_id)

    async def end_game(self, payload: Any = None) -> None:
        """Force the end sequence, e.g. when the host wants the game over.

        Also retries an end whose handle_end failed; without a payload the
        failed attempt's payload is reused.

        Raises:
            Exception: Whatever handle_end raised; the game stays closed to
                moves until an end succeeds.
        """
        async with self._lock:
            if self._ending and self._phase not in (GamePhase.ENDED, GamePhase.DESTROYED):
                logger.info("[%s] Retrying the end sequence", self.name)
                self._ending = False
                if payload is None:
                    payload = self._end_payload
            await self._finish(payload)

    def destroy(self) -> None:
        """Stop the game without results and let the room know."""
        if self._phase == GamePhase.DESTROYED:
            return
        self._phase = GamePhase.DESTROYED
        logger.info("[%s] Destroyed", self.name)
        self.host.broadcast(GameEventName.DESTROY)
        for listener in list(self._destroy_listeners):
            listener()

    # =========================================================================
    # Round / turn loop
    # =========================================================================

    async def _start(self) -> None:
        self._started = True
        self._phase = GamePhase.STARTED
        logger.info("[%s] Started, order %s", self.name, self._player_order)
        await self._start_round(1)

    async def _start_round(self, number: int) -> None:
        self._round = Round(number=number)
        self._round_had_turn = False

        # Let the game add custom fields to the round
        try:
            enriched = await self.rule_set.handle_round_start(self._round.model_copy(deep=True))
            if enriched is not None:
                if not isinstance(enriched, Round):
                    enriched = Round.model_validate(enriched)
                self._round = enriched.model_copy(update={"number": number})
        except Exception:
            logger.exception("[%s] handle_round_start failed, round %s starts unchanged", self.name, number)

        logger.info("[%s] Round %s started", self.name, number)
        await self._start_turn(1)

    async def _start_turn(self, number: int) -> None:
        self._turn = Turn(number=number)
        player = self._player_at(number)
        if player is None:
            logger.warning("[%s] Nobody can take turn %s, skipping", self.name, number)
            await self._next_turn(restart=True)
            return

        self._turn = Turn(number=number, player_id=player.id)
        self._round_had_turn = True

        try:
            self.rule_set.handle_turn_start(player, self.round, self.turn)
        except Exception:
            logger.exception("[%s] handle_turn_start failed", self.name)

        self.host.broadcast(
            GameEventName.TURN,
            TurnStarted(round=self._round, turn=self._turn).model_dump(mode="json"),
        )

    async def _next_turn(self, restart: bool = False) -> None:
        """Advance to the next turn, the next round, or the end.

        Args:
            restart: True when the current turn never had a player; the
                     turn-end hook is skipped.
        """
        if not restart:
            player = self._player_at(self._turn.number)
            try:
                await self.rule_set.handle_turn_end(player)
            except EndGame as signal:
                # Win condition after the turn, e.g. the board is dominated
                await self._finish(signal.payload)
                return
            except Exception:
                logger.exception("[%s] handle_turn_end failed, continuing", self.name)

        if self._is_over():
            return

        next_number = self._turn.number + 1
        if next_number > len(self._player_order):
            await self._next_round()
        else:
            await self._start_turn(next_number)

    async def _next_round(self) -> None:
        if not self._round_had_turn:
            raise GameFlowError(f"[{self.name}] No player in the turn order can take a turn")

        try:
            await self.rule_set.handle_round_end(self._round.model_copy(deep=True))
        except EndGame as signal:
            await self._finish(signal.payload)
            return
        except RestartRound:
            logger.info("[%s] Restarting round %s", self.name, self._round.number)
            await self._start_round(self._round.number)
            return
        except Exception as exc:
            logger.warning("[%s] handle_round_end rejected (%r), restarting round", self.name, exc)
            await self._start_round(self._round.number)
            return

        next_number = self._round.number + 1
        if self._max_rounds is not None and next_number > self._max_rounds:
            # The maximum amount of rounds allowed have been completed
            await self._finish(None)
        else:
            await self._start_round(next_number)

    async def _finish(self, payload: Any) -> None:
        if self._is_over():
            logger.warning("[%s] End requested again, ignoring", self.name)
            return

        # A failed handle_end leaves _ending set: moves stay rejected until
        # end_game retries.
        self._ending = True
        self._end_payload = payload
        results = await self.rule_set.handle_end(payload)

        self._end_results = results
        self._phase = GamePhase.ENDED
        logger.info("[%s] Ended: %r", self.name, results)

        # Let the clients know the game has ended, then the room
        self.host.broadcast(GameEventName.END, results)
        for listener in list(self._end_listeners):
            listener(results)

    async def _drop_player(self, player_id: str) -> None:
        """Remove a departed player from the registry and the turn order."""
        self._registry.remove(player_id)
        if player_id not in self._player_order:
            return

        index = self._player_order.index(player_id)
        del self._player_order[index]
        logger.info("[%s] Dropped %s from the turn order", self.name, player_id)

        if not self._started:
            if self._phase == GamePhase.READY_UP and len(self._registry) and self._registry.all_ready():
                await self._start()
            return

        current_index = self._turn.number - 1
        if index < current_index:
            # Everyone after the departed player slid down one slot
            self._turn = Turn(number=self._turn.number - 1, player_id=self._turn.player_id)
        elif index == current_index:
            # Their turn passes to whoever now sits in the same slot
            self._turn = Turn(number=self._turn.number - 1)
            await self._next_turn(restart=True)

    def _is_over(self) -> bool:
        """True once the end sequence has begun, or the game is gone."""
        return self._ending or self._phase in (GamePhase.ENDED, GamePhase.DESTROYED)

    def _player_at(self, number: int) -> Optional[Player]:
        if 1 <= number <= len(self._player_order):
            return self._registry.find(self._player_order[number - 1])
        return None

    # =========================================================================
    # Serialization
    # =========================================================================

    def broadcast_update(self, event: GameEventName = GameEventName.UPDATE) -> None:
        """Send every member their own view of the full game state."""
        self.host.broadcast_secret(event, lambda member_id: {"game": self.to_json_for_player(member_id)})

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "players": [p.to_dict() for p in self._registry],
            "settings": self._settings.to_dict(),
            "started": self._started,
            "moves": [m.model_dump(mode="json") for m in self._moves],
            "round": self._round.model_dump(mode="json"),
            "turn": self._turn.model_dump(mode="json"),
            "maxRounds": self._max_rounds,
            "playerOrder": list(self._player_order),
            "endResults": self._end_results,
        }

    def to_json_for_player(self, player_id: str) -> dict[str, Any]:
        """The state as one player may see it (rule set redaction applied)."""
        return self.rule_set.view_for_player(copy.deepcopy(self.to_json()), player_id)
