"""Chronological log of every notification delivered to room members."""

from datetime import datetime
from typing import Any, Optional
import yaml
from pydantic import BaseModel, Field


class LoggedEvent(BaseModel):
    """One delivered notification.

    recipient is None for broadcasts and the member id for
    per-recipient deliveries (secret views).
    """

    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    event: str
    recipient: Optional[str] = None
    payload: Any = None


class GameEventLog(BaseModel):
    """Append-only record of the notifications a room sent out."""

    log_id: str = Field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    events: list[LoggedEvent] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)

    def record(self, event: str, payload: Any = None, recipient: Optional[str] = None) -> LoggedEvent:
        entry = LoggedEvent(event=event, recipient=recipient, payload=payload)
        self.events.append(entry)
        return entry

    def events_named(self, event: str, recipient: Optional[str] = None) -> list[LoggedEvent]:
        """Events with the given name, optionally only those sent to `recipient`."""
        return [
            e for e in self.events
            if e.event == event and (recipient is None or e.recipient == recipient)
        ]

    def __len__(self) -> int:
        return len(self.events)

    def __str__(self) -> str:
        lines = [f"Event log {self.log_id} ({len(self.events)} events)"]
        for e in self.events:
            target = f" -> {e.recipient}" if e.recipient else ""
            lines.append(f"  {e.event}{target}: {e.payload}")
        return "\n".join(lines)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_yaml(self) -> str:
        """Serialize the event log to a YAML string."""
        data = self.model_dump(mode="json")
        return yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def save_to_file(self, filepath: str) -> None:
        """Serialize the event log to a YAML file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_yaml())

    @classmethod
    def load_from_file(cls, filepath: str) -> "GameEventLog":
        """Load an event log from a YAML file."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)
