"""In-process fan-out of notifications to room members."""

import logging
from typing import Any, Callable, Optional

from gamenight.events.event_log import GameEventLog
from gamenight.events.game_events import EventName, event_name

logger = logging.getLogger(__name__)

Send = Callable[[str, Any], None]


class Broadcaster:
    """Delivers notifications to connected members of one room.

    Contract:
      - a member receives notifications once `connect(member_id, send)` ran.
      - `broadcast` sends one payload to everyone; `broadcast_secret` builds
        a payload per member.
      - a member whose `send` raises is disconnected.

    Every delivery is recorded in `event_log` when one is given.
    """

    def __init__(self, event_log: Optional[GameEventLog] = None) -> None:
        self._connections: dict[str, Send] = {}
        self.event_log = event_log

    def connect(self, member_id: str, send: Send) -> None:
        self._connections[member_id] = send

    def disconnect(self, member_id: str) -> None:
        self._connections.pop(member_id, None)

    def connected(self) -> list[str]:
        return list(self._connections)

    def broadcast(self, event: EventName, payload: Any = None) -> None:
        name = event_name(event)
        if self.event_log is not None:
            self.event_log.record(name, payload)
        for member_id, send in list(self._connections.items()):
            self._deliver(member_id, send, name, payload)

    def broadcast_secret(self, event: EventName, build: Callable[[str], Any]) -> None:
        name = event_name(event)
        for member_id, send in list(self._connections.items()):
            payload = build(member_id)
            if self.event_log is not None:
                self.event_log.record(name, payload, recipient=member_id)
            self._deliver(member_id, send, name, payload)

    def send_to(self, member_id: str, event: EventName, payload: Any = None) -> None:
        send = self._connections.get(member_id)
        if send is None:
            return
        name = event_name(event)
        if self.event_log is not None:
            self.event_log.record(name, payload, recipient=member_id)
        self._deliver(member_id, send, name, payload)

    def _deliver(self, member_id: str, send: Send, name: str, payload: Any) -> None:
        try:
            send(name, payload)
        except Exception:
            logger.warning("Delivery of %s to %s failed, disconnecting", name, member_id, exc_info=True)
            self.disconnect(member_id)
