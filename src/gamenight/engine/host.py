"""GameHost - what a game needs from the room it runs in."""

from typing import Any, Callable, Protocol, Sequence

from gamenight.events.game_events import EventName
from gamenight.models.player import RosterEntry


class GameHost(Protocol):
    """The surrounding room, as seen by a GameController.

    The host owns membership and delivery. The controller only reads the
    roster and hands it notifications to fan out.
    """

    @property
    def players(self) -> Sequence[RosterEntry]:
        """Current roster, in join order."""
        ...

    def broadcast(self, event: EventName, payload: Any = None) -> None:
        """Send the same payload to every member."""
        ...

    def broadcast_secret(self, event: EventName, build: Callable[[str], Any]) -> None:
        """Send each member the payload returned by build(member_id)."""
        ...
