#!/usr/bin/env python
"""Run a game night of stub bots in the terminal.

Usage:
    gamenight                                  # 3 bots, one game of High Roll
    gamenight --players 4 --seed 42            # Reproducible 4-player game
    gamenight --target 20 --rounds 3 --watch   # Shorter game, print every event
    gamenight --config night.yaml              # Room, players and playlist from YAML
    gamenight --log-file night.yaml            # Save every notification as YAML
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from gamenight.ai.stub_bot import Participant, create_stub_bots
from gamenight.config import GameNightConfig, load_config
from gamenight.engine.errors import GameEnded, RuleRejection
from gamenight.engine.game import GameController
from gamenight.events.event_log import GameEventLog
from gamenight.events.game_events import GameEventName
from gamenight.games import load_game
from gamenight.models.game_state import GameDescriptor
from gamenight.models.player import RosterEntry
from gamenight.room.broadcaster import Broadcaster
from gamenight.room.room import Room

logger = logging.getLogger("gamenight")

# Upper bound on moves per game so a broken rule set cannot spin forever
MAX_MOVES_PER_GAME = 10_000


def _create_printer(console: Console, watch: bool):
    """Create a member connection that prints what it receives.

    Args:
        console: Rich console for output
        watch: If True, print every turn and move, not only results

    Returns:
        Send callback to pass to Broadcaster.connect
    """

    def send(event: str, payload: Any) -> None:
        if event == GameEventName.END.value:
            console.print(Panel(_results_table(payload), title="Results", expand=False))
        elif not watch:
            return
        elif event == GameEventName.TURN.value:
            turn = payload["turn"]
            bonus = payload["round"].get("bonus")
            extra = f" (bonus {bonus})" if bonus is not None else ""
            console.print(f"[bold]Round {payload['round']['number']}[/bold]{extra}, "
                          f"turn {turn['number']}: [cyan]{turn['player_id']}[/cyan]")
        elif event == GameEventName.MOVE.value:
            console.print(f"  [cyan]{payload['player_id']}[/cyan] -> {payload['payload']}")
        else:
            console.print(f"[dim]{event}[/dim]")

    return send


def _results_table(results: Any) -> Any:
    if not isinstance(results, dict) or "scores" not in results:
        return str(results)
    table = Table(show_header=True)
    table.add_column("Player")
    table.add_column("Score", justify="right")
    for player_id, score in sorted(results["scores"].items(), key=lambda kv: -kv[1]):
        marker = " *" if player_id == results.get("winner") else ""
        table.add_row(f"{player_id}{marker}", str(score))
    return table


async def play_game(game: GameController, bots: dict[str, Participant], console: Optional[Console] = None) -> Any:
    """Drive one game to its end with bots.

    Returns:
        The game's end results (None if it was destroyed).
    """
    if not game.started:
        for player in game.players:
            bot = bots[player.id]
            await game.ready_up(player.id, await bot.ready_payload(game.to_json_for_player(player.id)))

    moves = 0
    while not game.ended and not game.destroyed:
        player_id = game.turn.player_id
        if player_id is None:
            logger.error("[%s] No player holds the turn, giving up", game.name)
            break
        moves += 1
        if moves > MAX_MOVES_PER_GAME:
            logger.error("[%s] Move limit reached, giving up", game.name)
            break

        move = await bots[player_id].choose_move(game.to_json_for_player(player_id))
        try:
            await game.play_move(player_id, move)
        except RuleRejection as exc:
            if console is not None:
                console.print(f"[yellow]{player_id}: {exc}[/yellow]")
        except GameEnded:
            # The end sequence began but handle_end failed
            logger.error("[%s] Game could not finish, giving up", game.name)
            break

    return game.end_results


async def run_game_night(
    config: GameNightConfig,
    console: Console,
    watch: bool = False,
    log_file: Optional[str] = None,
) -> list[Any]:
    """Run every game of the playlist with one bot per player.

    Returns:
        End results of each game played, in order.
    """
    rng = random.Random(config.seed)
    event_log = GameEventLog(metadata={"room": config.room, "seed": config.seed})

    entries = [RosterEntry(id=name, name=name) for name in config.players]
    room = Room(
        config.room,
        entries[0],
        settings=config.room_settings,
        broadcaster=Broadcaster(event_log),
        game_settings=config.game_settings(),
        rng=rng,
    )
    for entry in entries:
        room.add_player(entry, password=config.room_settings.password)
    # Only the host's connection prints, everyone else receives silently
    room.broadcaster.connect(entries[0].id, _create_printer(console, watch))
    for entry in entries[1:]:
        room.broadcaster.connect(entry.id, lambda event, payload: None)

    for descriptor in config.playlist:
        if not room.add_game(descriptor):
            logger.warning("Playlist full, skipping %s", descriptor.name)

    bots = create_stub_bots(config.players, seed=config.seed)
    results: list[Any] = []

    try:
        game = await room.start(lambda slug: load_game(slug, rng=rng))
        while game is not None:
            console.rule(game.name)
            results.append(await play_game(game, bots, console))
            task = room.next_game_task
            if task is None or game.destroyed:
                break
            await task
            game = room.game
    finally:
        room.close()
        if log_file:
            event_log.save_to_file(log_file)
            console.print(f"Event log saved to {log_file}")

    return results


def _build_config(args: argparse.Namespace) -> GameNightConfig:
    if args.config:
        config = load_config(args.config)
    else:
        players = [f"player{i}" for i in range(1, args.players + 1)]
        config = GameNightConfig(
            players=players,
            playlist=[GameDescriptor(
                name="High Roll",
                settings={"target": args.target, "rounds": args.rounds},
            )],
        )

    updates: dict[str, Any] = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.results_timeout is not None:
        updates["results_timeout"] = args.results_timeout
    if args.verbose:
        updates["log_level"] = "DEBUG"
    return config.model_copy(update=updates)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="gamenight - run a room of bots through a playlist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--players", type=int, default=3, help="Number of bots (default: 3)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible games")
    parser.add_argument("--target", type=int, default=30, help="High Roll target score (default: 30)")
    parser.add_argument("--rounds", type=int, default=5, help="High Roll round limit (default: 5)")
    parser.add_argument(
        "--results-timeout",
        type=float,
        default=None,
        help="Seconds to show results before the next game (default: 0)",
    )
    parser.add_argument("--watch", action="store_true", help="Print every turn and move")
    parser.add_argument("--log-file", type=str, default=None, help="Save the event log as YAML")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    if args.players < 1:
        print("Error: --players must be a positive integer", file=sys.stderr)
        return 1

    config = _build_config(args)
    if config.seed is None:
        config = config.model_copy(update={"seed": random.randint(1, 1_000_000)})

    console = Console()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    console.print(f"[bold]{config.room}[/bold] seed={config.seed} players={', '.join(config.players)}")
    asyncio.run(run_game_night(config, console, watch=args.watch, log_file=args.log_file))
    return 0


if __name__ == "__main__":
    exit(main())
